"""Unit tests for component token timestamps."""

import math

import pytest

from mfgsim.component import Component
from mfgsim.enums import ComponentName, EntityType
from mfgsim.errors import SimulationError


def test_first_arrival_uses_absolute_clock():
    component = Component(ComponentName.C1)
    visit = component.arrive(EntityType.INSPECTOR, 5.0, None)
    assert visit.arrival_time == 5.0
    assert visit.inter_arrival_time == 5.0
    assert component.system_time(EntityType.INSPECTOR) is None


def test_inter_arrival_relative_to_previous():
    component = Component(ComponentName.C2)
    component.arrive(EntityType.WORKBENCH, 12.0, 5.0)
    assert math.isclose(component.inter_arrival_time(EntityType.WORKBENCH), 7.0)


def test_retire_sets_system_time_once():
    component = Component(ComponentName.C1)
    component.arrive(EntityType.INSPECTOR, 3.0, None)
    assert component.retire(EntityType.INSPECTOR, 10.0) == 7.0
    with pytest.raises(SimulationError):
        component.retire(EntityType.INSPECTOR, 11.0)


def test_retire_unvisited_entity_type_raises():
    component = Component(ComponentName.C3)
    with pytest.raises(SimulationError):
        component.retire(EntityType.WORKBENCH, 1.0)


def test_total_system_time_spans_every_visit():
    component = Component(ComponentName.C1)
    component.arrive(EntityType.INSPECTOR, 1.0, None)
    component.retire(EntityType.INSPECTOR, 4.0)
    component.arrive(EntityType.WORKBENCH, 4.0, None)
    component.retire(EntityType.WORKBENCH, 10.0)
    assert math.isclose(component.total_system_time(), 9.0)

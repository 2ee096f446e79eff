"""Unit tests for the Little's Law evaluator."""

import math

import pytest

from mfgsim.component import Component, Visit
from mfgsim.enums import ComponentName, EntityType
from mfgsim.errors import EmptySampleError
from mfgsim.littles_law import (
    evaluate_littles_law,
    mean_inter_arrival_time,
    mean_system_time,
    relative_error,
)


def make_components(system_times, inter_arrival=100.0):
    components = []
    for i, system_time in enumerate(system_times):
        component = Component(ComponentName.C1)
        component.visits[EntityType.INSPECTOR] = Visit(
            arrival_time=inter_arrival * (i + 1),
            inter_arrival_time=inter_arrival,
            system_time=float(system_time),
        )
        components.append(component)
    return components


def test_littles_law_known_case():
    components = make_components([10, 20, 30, 40, 50])
    result = evaluate_littles_law(components, avg_number_in_system=0.3)
    assert math.isclose(result.arrival_rate, 36.0)
    assert math.isclose(result.W, 30.0 / 3600.0)
    assert math.isclose(result.little_product, 0.3, rel_tol=1e-9)
    assert result.little_error < 1e-9
    assert result.n_samples == 5
    assert result.as_dict()["L"] == 0.3


def test_littles_law_per_entity_type_matches_whole_line_for_single_visit():
    components = make_components([10, 20, 30, 40, 50])
    whole = evaluate_littles_law(components, 0.3)
    local = evaluate_littles_law(components, 0.3, entity_type=EntityType.INSPECTOR)
    assert math.isclose(whole.little_product, local.little_product)


def test_littles_law_empty_collection_is_distinct_error():
    with pytest.raises(EmptySampleError):
        evaluate_littles_law([], 0.3)
    with pytest.raises(ValueError):
        mean_system_time([])
    with pytest.raises(EmptySampleError):
        mean_inter_arrival_time([])


def test_mean_system_time_requires_retired_tokens():
    component = Component(ComponentName.C1)
    component.arrive(EntityType.WORKBENCH, 1.0, None)
    with pytest.raises(ValueError):
        mean_system_time([component], EntityType.WORKBENCH)


def test_relative_error_guard_zero_reference():
    assert relative_error(0.0, 0.0) == 0.0
    assert math.isinf(relative_error(1.0, 0.0))
    assert math.isclose(relative_error(1.1, 1.0), 0.1)

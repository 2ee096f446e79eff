"""Closed sets shared by every entity of the manufacturing line."""

from __future__ import annotations

from enum import Enum


class EntityState(Enum):
    INITIALIZED = "INITIALIZED"
    ACTIVE = "ACTIVE"
    BLOCKED = "BLOCKED"
    DONE = "DONE"


class EntityType(Enum):
    """Role a component's timestamps refer to."""

    INSPECTOR = "INSPECTOR"
    WORKBENCH = "WORKBENCH"


class ComponentName(Enum):
    C1 = "C1"
    C2 = "C2"
    C3 = "C3"


class Product(Enum):
    P1 = "P1"
    P2 = "P2"
    P3 = "P3"

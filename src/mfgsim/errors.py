"""Exceptions raised by the simulation engine."""

from __future__ import annotations


class SimulationError(Exception):
    """Base class for engine errors."""


class EmptySampleError(SimulationError, ValueError):
    """An average was requested over zero observations."""


class BufferFullError(SimulationError, RuntimeError):
    """A component was pushed into a buffer without room for it."""

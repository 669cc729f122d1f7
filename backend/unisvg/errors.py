"""Exceptions raised at the engine's programmatic seams.

Validation problems are never raised; they are returned as issues inside a
ValidationReport. Generation tier failures are raised inside a tier and
caught by the orchestrator (see unisvg.generation.errors).
"""

from __future__ import annotations


class UnisvgError(Exception):
    """Base class for all engine errors."""


class UnsupportedAspectRatio(UnisvgError, ValueError):
    def __init__(self, ratio: str):
        super().__init__(f"Unsupported aspect ratio: {ratio}")
        self.ratio = ratio


class UnknownRegionError(UnisvgError, KeyError):
    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Unknown region: {self.name}"


class InvalidBoundsError(UnisvgError, ValueError):
    """Region bounds fall outside the unit square."""


class NameConflictError(UnisvgError, ValueError):
    """A custom region tried to shadow or remove a standard region."""

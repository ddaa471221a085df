from __future__ import annotations
from typing import Optional

__all__ = [
    "HealthMapError",
    "InsufficientDataError",
    "DuplicateRegionKeyError",
    "CoercionWarning",
]


class HealthMapError(Exception):
    """Base class for errors raised by the map engine."""


class InsufficientDataError(HealthMapError):
    """Fewer than two finite values for the selected field; nothing may be drawn."""

    def __init__(self, field: Optional[str], n_valid: int):
        self.field = field
        self.n_valid = n_valid
        name = f'"{field}"' if field else "the selected field"
        super().__init__(f"Not enough valid data for {name} ({n_valid} usable value(s), need at least 2)")


class DuplicateRegionKeyError(HealthMapError):
    def __init__(self, keys: list[str]):
        self.keys = keys
        super().__init__(f"Region keys must be unique; duplicated: {', '.join(keys)}")


class CoercionWarning(UserWarning):
    """Some values of a field could not be read as numbers and render as 'no data'."""

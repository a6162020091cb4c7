"""Duplicate guard for day / time / specialty working lists.

The dashboard builds a doctor's slot times and extra specialties one value
at a time; these helpers decide whether a value may be added and which
options remain selectable.
"""
from typing import Iterable, List, Sequence

from hospital_cms.config import DAYS_OF_WEEK, TIME_OPTIONS


class DuplicateValueError(ValueError):
    """Raised when a value is already present in the working list."""

    def __init__(self, label: str, value: str):
        super().__init__(f"This {label} has already been added: {value}")
        self.label = label
        self.value = value


def append_unique(values: Sequence[str], candidate: str, label: str = "value") -> List[str]:
    """
    Return a new list with ``candidate`` appended.

    The input sequence is never modified.

    Args:
        values: Current working list
        candidate: Value to add (surrounding whitespace is ignored)
        label: Human name for error messages ("time", "day", "specialty")

    Raises:
        ValueError: If the candidate is blank
        DuplicateValueError: If the candidate is already in the list
    """
    cleaned = candidate.strip() if candidate else ""
    if not cleaned:
        raise ValueError(f"A {label} is required")

    if cleaned in values:
        raise DuplicateValueError(label, cleaned)

    return [*values, cleaned]


def find_duplicates(values: Iterable[str]) -> List[str]:
    """Values that appear more than once, in first-repeat order."""
    seen = set()
    duplicates = []
    for value in values:
        if value in seen and value not in duplicates:
            duplicates.append(value)
        seen.add(value)
    return duplicates


def selectable_days(occupied: Iterable[str], current_days: Iterable[str] = ()) -> List[str]:
    """
    Weekdays that can still be assigned.

    When editing an existing record pass its ``current_days``; they stay
    selectable even though the record itself occupies them. Records in the
    older multi-day shape own more than one.
    """
    occupied = set(occupied)
    current_days = set(current_days)
    return [
        day for day in DAYS_OF_WEEK
        if day in current_days or day not in occupied
    ]


def selectable_times(chosen: Iterable[str]) -> List[str]:
    """Time options not already in the working list."""
    chosen = set(chosen)
    return [time for time in TIME_OPTIONS if time not in chosen]

"""
Cross-field invariants for trip requests and destinations.

Pydantic handles the shape of request bodies; these checks run on the
*effective* values (stored row merged with a partial update), collect every
violation and raise them together.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from app.core.datetime_utils import to_naive_utc, utcnow
from app.core.exceptions import ValidationError, Violation


def merge_changes(current: Dict[str, Any], changes: Dict[str, Any]) -> Dict[str, Any]:
    """Fields not supplied keep their prior values."""
    merged = dict(current)
    merged.update(changes)
    return merged


def raise_if_any(violations: List[Violation]) -> None:
    if violations:
        raise ValidationError(violations)


def trip_schedule_violations(
    departure_at: Optional[datetime],
    return_at: Optional[datetime],
    check_departure_in_future: bool,
    now: Optional[datetime] = None,
) -> List[Violation]:
    violations = []
    departure_at = to_naive_utc(departure_at)
    return_at = to_naive_utc(return_at)
    now = now or utcnow()

    if departure_at is None:
        violations.append(Violation("departure_at", "required", "The departure date is required."))
    elif check_departure_in_future and departure_at <= now:
        violations.append(Violation("departure_at", "after_now", "The departure date must be in the future."))

    if return_at is None:
        violations.append(Violation("return_at", "required", "The return date is required."))
    elif departure_at is not None and return_at <= departure_at:
        violations.append(Violation("return_at", "after_departure", "The return date must be after the departure date."))

    return violations


def trip_schedule_update_violations(
    current: Dict[str, Any],
    changes: Dict[str, Any],
    now: Optional[datetime] = None,
) -> List[Violation]:
    """
    Check the schedule that results from applying `changes` to `current`.

    The future-departure rule only applies when the update moves the
    departure; an untouched departure that has since passed does not block
    editing the description.
    """
    merged = merge_changes(current, changes)
    return trip_schedule_violations(
        merged.get("departure_at"),
        merged.get("return_at"),
        check_departure_in_future="departure_at" in changes,
        now=now,
    )


def destination_violations(values: Dict[str, Any]) -> List[Violation]:
    violations = []
    for field in ("city", "country"):
        value = values.get(field)
        if value is None or not str(value).strip():
            violations.append(Violation(field, "required", f"The {field} field is required."))
    return violations


def validate_destination(values: Dict[str, Any]) -> None:
    raise_if_any(destination_violations(values))

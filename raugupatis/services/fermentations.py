"""
Fermentation update rules.

Turns a partial update request into the column changes to write, enforcing
the status lifecycle and date ordering.
"""
from datetime import datetime
from typing import Any, Optional

from raugupatis.exceptions import ValidationError
from raugupatis.infra.db.base import utcnow
from raugupatis.infra.db.models import Fermentation, FermentationStatus, STATUS_TRANSITIONS

TERMINAL_STATUSES = {FermentationStatus.COMPLETED, FermentationStatus.FAILED}


def check_dates(start: datetime, target_end: Optional[datetime], actual_end: Optional[datetime]) -> None:
    fields: dict[str, str] = {}
    if target_end is not None and target_end < start:
        fields["target_end_date"] = "Target end date cannot be before the start date"
    if actual_end is not None and actual_end < start:
        fields["actual_end_date"] = "End date cannot be before the start date"
    if fields:
        raise ValidationError("Invalid dates", fields=fields)


def plan_update(fermentation: Fermentation, changes: dict[str, Any]) -> dict[str, Any]:
    """
    Validate ``changes`` against the current row and return what to persist.

    Status may move active -> paused|completed|failed and paused ->
    active|completed|failed. Completed and failed are terminal. Finishing a
    fermentation stamps ``actual_end_date`` unless one is supplied.
    """
    changes = dict(changes)

    if "name" in changes and changes["name"] is None:
        raise ValidationError.for_field("name", "Name cannot be empty")
    if "profile_id" in changes and changes["profile_id"] is None:
        raise ValidationError.for_field("profile_id", "Profile is required")
    if "start_date" in changes and changes["start_date"] is None:
        raise ValidationError.for_field("start_date", "Start date is required")
    if "status" in changes:
        if changes["status"] is None:
            raise ValidationError.for_field("status", "Status is required")
        new_status = FermentationStatus(changes["status"])
        current = FermentationStatus(fermentation.status)
        if new_status != current and new_status not in STATUS_TRANSITIONS[current]:
            raise ValidationError.for_field(
                "status", f"Cannot change status from {current.value} to {new_status.value}"
            )
        changes["status"] = new_status.value
        if new_status in TERMINAL_STATUSES and new_status != current:
            if changes.get("actual_end_date") is None and fermentation.actual_end_date is None:
                start = changes.get("start_date") or fermentation.start_date
                changes["actual_end_date"] = max(utcnow(), start)

    if "ingredients" in changes and changes["ingredients"] is None:
        changes["ingredients"] = []
    for key in ("notes", "lessons_learned"):
        if key in changes and changes[key] is not None:
            changes[key] = changes[key].strip() or None

    check_dates(
        changes.get("start_date", fermentation.start_date),
        changes.get("target_end_date", fermentation.target_end_date),
        changes.get("actual_end_date", fermentation.actual_end_date),
    )
    return changes

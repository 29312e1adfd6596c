"""Domain events emitted when schedules change."""

from __future__ import annotations

from pydantic import BaseModel

from academy.domain.models import ConflictType


class ScheduleCreated(BaseModel):
    """Fired when a new Schedule is stored."""

    schedule_id: str
    changed_by: str = "system"


class ScheduleUpdated(BaseModel):
    """Fired after a Schedule is replaced by an edited copy."""

    schedule_id: str
    old_data: dict
    changed_by: str = "system"


class ScheduleDeactivated(BaseModel):
    """Fired when a Schedule is soft-deleted."""

    schedule_id: str
    changed_by: str = "system"


class ConflictDetected(BaseModel):
    """Fired when a schedule is saved despite overlapping existing ones."""

    schedule_id: str
    conflict_type: ConflictType
    conflicting_schedule_ids: list[str]

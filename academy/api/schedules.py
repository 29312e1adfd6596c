"""Schedule routes: conflict validation, CRUD and change history."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query

from academy.api.deps import get_bus, get_repos, get_settings
from academy.api.responses import method_not_allowed, success
from academy.core.config import Settings
from academy.domain.bus import EventBus
from academy.domain.errors import ApiError
from academy.domain.events import (
    ConflictDetected,
    ScheduleCreated,
    ScheduleDeactivated,
    ScheduleUpdated,
)
from academy.domain.handlers import history_snapshot
from academy.domain.models import (
    Classroom,
    ConflictReport,
    DayOfWeek,
    Schedule,
    ScheduleCandidate,
    ScheduleCreate,
    ScheduleUpdate,
)
from academy.repos.memory import Repositories
from academy.services.capacity import check_capacity
from academy.services.conflicts import check_schedule
from academy.services.timeutil import to_minutes

logger = logging.getLogger(__name__)

router = APIRouter()

# Optional schedule fields that an explicit null in a PUT clears.
_CLEARABLE_FIELDS = {"description", "max_students"}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _resolve_references(repos: Repositories, schedule: Schedule) -> Classroom:
    """404 unless every referenced preset exists in the schedule's academy."""
    if repos.academies.get(schedule.academy_id) is None:
        raise ApiError(404, "Academy not found.")

    lookups = (
        (repos.subjects, schedule.subject_id, "Subject"),
        (repos.class_types, schedule.class_type_id, "Class type"),
        (repos.instructors, schedule.instructor_id, "Instructor"),
        (repos.classrooms, schedule.classroom_id, "Classroom"),
    )
    found = {}
    for repo, item_id, label in lookups:
        item = repo.get(item_id) if item_id else None
        if item is None or item.academy_id != schedule.academy_id:
            raise ApiError(404, f"{label} not found.")
        found[label] = item
    return found["Classroom"]


def _check_slot(
    repos: Repositories,
    settings: Settings,
    schedule: Schedule,
    exclude_id: str | None = None,
) -> ConflictReport:
    classroom = _resolve_references(repos, schedule)
    capacity_error = check_capacity(classroom, schedule.max_students)
    if capacity_error:
        raise ApiError(400, capacity_error)

    candidate = ScheduleCandidate(
        academy_id=schedule.academy_id,
        day_of_week=schedule.day_of_week,
        start_time=schedule.start_time,
        end_time=schedule.end_time,
        instructor_id=schedule.instructor_id,
        classroom_id=schedule.classroom_id,
        exclude_id=exclude_id,
    )
    report = check_schedule(repos.schedules, candidate)
    if report.has_conflicts and settings.REJECT_CONFLICTING_SCHEDULES:
        raise ApiError(409, report.message, report)
    return report


def _publish_conflicts(bus: EventBus, schedule_id: str, report: ConflictReport) -> None:
    if not report.has_conflicts:
        return
    bus.publish(
        ConflictDetected(
            schedule_id=schedule_id,
            conflict_type=report.conflict_type,
            conflicting_schedule_ids=[c.conflicting_slot.id for c in report.conflicts],
        )
    )


# ---------------------------------------------------------------------------
# Conflict validation
# ---------------------------------------------------------------------------


@router.post("/validate")
def validate_schedule(payload: ScheduleCandidate, repos: Repositories = Depends(get_repos)):
    """Check a proposed slot against existing instructor and classroom bookings."""
    report = check_schedule(repos.schedules, payload)
    return success(report, "Validation complete.")


@router.api_route("/validate", methods=["GET", "PUT", "DELETE", "PATCH"], include_in_schema=False)
def validate_schedule_other_methods():
    return method_not_allowed(["POST"])


# ---------------------------------------------------------------------------
# Collection
# ---------------------------------------------------------------------------


@router.get("")
def list_schedules(
    academy_id: str = Query(alias="academyId"),
    day_of_week: DayOfWeek | None = Query(default=None, alias="dayOfWeek"),
    instructor_id: str | None = Query(default=None, alias="instructorId"),
    classroom_id: str | None = Query(default=None, alias="classroomId"),
    subject_id: str | None = Query(default=None, alias="subjectId"),
    class_type_id: str | None = Query(default=None, alias="classTypeId"),
    repos: Repositories = Depends(get_repos),
):
    """Active schedules ordered by day of week, then start time."""
    schedules = repos.schedules.list_filtered(
        academy_id,
        day_of_week=day_of_week,
        instructor_id=instructor_id,
        classroom_id=classroom_id,
        subject_id=subject_id,
        class_type_id=class_type_id,
    )
    return success(schedules, f"Found {len(schedules)} schedules.")


@router.post("")
def create_schedule(
    payload: ScheduleCreate,
    repos: Repositories = Depends(get_repos),
    bus: EventBus = Depends(get_bus),
    settings: Settings = Depends(get_settings),
):
    schedule = Schedule(**payload.model_dump(exclude_none=True))
    report = _check_slot(repos, settings, schedule)

    repos.schedules.add(schedule)
    bus.publish(ScheduleCreated(schedule_id=schedule.id))
    _publish_conflicts(bus, schedule.id, report)
    logger.info("Created schedule %s (%s)", schedule.id, schedule.title)
    return success(schedule, "Schedule created.", status_code=201)


@router.api_route("", methods=["PUT", "DELETE", "PATCH"], include_in_schema=False)
def schedules_other_methods():
    return method_not_allowed(["GET", "POST"])


# ---------------------------------------------------------------------------
# Single schedule
# ---------------------------------------------------------------------------


def _get_or_404(repos: Repositories, schedule_id: str) -> Schedule:
    schedule = repos.schedules.get(schedule_id)
    if schedule is None:
        raise ApiError(404, "Schedule not found.")
    return schedule


@router.get("/{schedule_id}")
def get_schedule(schedule_id: str, repos: Repositories = Depends(get_repos)):
    return success(_get_or_404(repos, schedule_id))


@router.put("/{schedule_id}")
def update_schedule(
    schedule_id: str,
    payload: ScheduleUpdate,
    repos: Repositories = Depends(get_repos),
    bus: EventBus = Depends(get_bus),
    settings: Settings = Depends(get_settings),
):
    """Apply a partial update, re-checking conflicts with the schedule itself excluded."""
    existing = _get_or_404(repos, schedule_id)
    changes = {
        k: v
        for k, v in payload.model_dump(exclude_unset=True).items()
        if v is not None or k in _CLEARABLE_FIELDS
    }
    updated = Schedule.model_validate(
        {**existing.model_dump(), **changes, "updated_at": datetime.now(timezone.utc)}
    )
    if to_minutes(updated.end_time) <= to_minutes(updated.start_time):
        raise ApiError(400, "endTime must be after startTime")

    report = _check_slot(repos, settings, updated, exclude_id=existing.id)

    old_data = history_snapshot(existing)
    repos.schedules.replace(updated)
    bus.publish(ScheduleUpdated(schedule_id=updated.id, old_data=old_data))
    _publish_conflicts(bus, updated.id, report)
    return success(updated, "Schedule updated.")


@router.delete("/{schedule_id}")
def delete_schedule(
    schedule_id: str,
    repos: Repositories = Depends(get_repos),
    bus: EventBus = Depends(get_bus),
):
    """Soft delete: the schedule stops taking part in conflict checks."""
    _get_or_404(repos, schedule_id)
    repos.schedules.deactivate(schedule_id)
    bus.publish(ScheduleDeactivated(schedule_id=schedule_id))
    logger.info("Deactivated schedule %s", schedule_id)
    return success({"id": schedule_id}, "Schedule deleted.")


@router.get("/{schedule_id}/history")
def get_schedule_history(schedule_id: str, repos: Repositories = Depends(get_repos)):
    """Change history, including for schedules that have since been deleted."""
    if repos.schedules.find(schedule_id) is None:
        raise ApiError(404, "Schedule not found.")
    entries = repos.history.list_for_schedule(schedule_id)
    return success(entries, f"Found {len(entries)} history entries.")

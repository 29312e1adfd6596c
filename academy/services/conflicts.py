"""Service for detecting instructor and classroom double-bookings."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from academy.domain.errors import StoreReadError
from academy.domain.models import (
    ConflictEntry,
    ConflictReport,
    ConflictType,
    ResourceKind,
    ScheduleCandidate,
    ScheduleSlot,
)
from academy.repos.store import ScheduleStore
from academy.services.timeutil import to_minutes

logger = logging.getLogger(__name__)

_LABELS = {
    ResourceKind.INSTRUCTOR: "Instructor",
    ResourceKind.CLASSROOM: "Classroom",
}


def overlaps(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    """Half-open interval intersection on minutes since midnight.

    Ranges that only touch (``a_end == b_start``) do NOT overlap.
    """
    return a_start < b_end and a_end > b_start


def find_conflicts(
    start_time: str,
    end_time: str,
    existing_slots: Sequence[ScheduleSlot],
) -> list[ScheduleSlot]:
    """Return the existing slots that overlap ``start_time``-``end_time``, in input order."""
    start, end = to_minutes(start_time), to_minutes(end_time)
    return [
        slot
        for slot in existing_slots
        if overlaps(start, end, to_minutes(slot.start_time), to_minutes(slot.end_time))
    ]


def _entry(kind: ResourceKind, slot: ScheduleSlot) -> ConflictEntry:
    message = f"{_LABELS[kind]} is already booked {slot.start_time}-{slot.end_time}"
    if slot.title:
        message += f" ({slot.title})"
    return ConflictEntry(resource_kind=kind, message=message, conflicting_slot=slot)


def _summary(conflict_type: ConflictType | None) -> str:
    if conflict_type is ConflictType.BOTH:
        return "Both the instructor and the classroom are already booked at this time."
    if conflict_type is ConflictType.INSTRUCTOR:
        return "The instructor is already booked at this time."
    if conflict_type is ConflictType.CLASSROOM:
        return "The classroom is already booked at this time."
    return "No conflicts."


def validate(
    candidate: ScheduleCandidate,
    existing_instructor_slots: Sequence[ScheduleSlot],
    existing_classroom_slots: Sequence[ScheduleSlot],
) -> ConflictReport:
    """Build a conflict report for *candidate* against pre-scoped snapshots.

    The snapshots must already be filtered to the candidate's academy, day,
    resource and active state (see :meth:`ScheduleStore.list_active`); only the
    time overlap is checked here. A dimension whose id is missing on the
    candidate is skipped even if snapshot data is passed in.

    Entries are ordered instructor first, then classroom, each in snapshot
    order.
    """
    conflicts: list[ConflictEntry] = []

    if candidate.instructor_id:
        for slot in find_conflicts(candidate.start_time, candidate.end_time, existing_instructor_slots):
            conflicts.append(_entry(ResourceKind.INSTRUCTOR, slot))
    if candidate.classroom_id:
        for slot in find_conflicts(candidate.start_time, candidate.end_time, existing_classroom_slots):
            conflicts.append(_entry(ResourceKind.CLASSROOM, slot))

    kinds = {c.resource_kind for c in conflicts}
    if len(kinds) == 2:
        conflict_type = ConflictType.BOTH
    elif ResourceKind.INSTRUCTOR in kinds:
        conflict_type = ConflictType.INSTRUCTOR
    elif ResourceKind.CLASSROOM in kinds:
        conflict_type = ConflictType.CLASSROOM
    else:
        conflict_type = None

    return ConflictReport(
        has_conflicts=len(conflicts) > 0,
        conflicts=conflicts,
        conflict_type=conflict_type,
        message=_summary(conflict_type),
    )


def check_schedule(store: ScheduleStore, candidate: ScheduleCandidate) -> ConflictReport:
    """Query *store* for both resource dimensions and validate *candidate*.

    A :class:`StoreReadError` propagates; there is no partial result.
    """
    instructor_slots: list[ScheduleSlot] = []
    classroom_slots: list[ScheduleSlot] = []
    try:
        if candidate.instructor_id:
            instructor_slots = store.list_active(
                candidate.academy_id,
                candidate.day_of_week,
                ResourceKind.INSTRUCTOR,
                candidate.instructor_id,
                exclude_id=candidate.exclude_id,
            )
        if candidate.classroom_id:
            classroom_slots = store.list_active(
                candidate.academy_id,
                candidate.day_of_week,
                ResourceKind.CLASSROOM,
                candidate.classroom_id,
                exclude_id=candidate.exclude_id,
            )
    except StoreReadError:
        logger.exception(
            "Schedule store read failed for academy=%s day=%s",
            candidate.academy_id,
            candidate.day_of_week,
        )
        raise

    report = validate(candidate, instructor_slots, classroom_slots)
    if report.has_conflicts:
        logger.info(
            "%d conflict(s) for %s %s-%s in academy %s",
            len(report.conflicts),
            candidate.day_of_week,
            candidate.start_time,
            candidate.end_time,
            candidate.academy_id,
        )
    return report

"""Tests for the schedule conflict-detection service."""

import pytest

from academy.domain.errors import StoreReadError
from academy.domain.models import (
    ConflictType,
    DayOfWeek,
    ResourceKind,
    Schedule,
    ScheduleCandidate,
    ScheduleSlot,
)
from academy.repos.memory import ScheduleRepository
from academy.services.conflicts import check_schedule, find_conflicts, overlaps, validate


def _make_slot(start: str, end: str, title: str | None = None, **overrides) -> ScheduleSlot:
    defaults = dict(
        academy_id="academy-1",
        day_of_week=DayOfWeek.MONDAY,
        instructor_id="instructor-1",
        classroom_id="room-1",
    )
    defaults.update(overrides)
    return ScheduleSlot(start_time=start, end_time=end, title=title, **defaults)


def _make_candidate(start: str, end: str, **overrides) -> ScheduleCandidate:
    defaults = dict(
        academy_id="academy-1",
        day_of_week=DayOfWeek.MONDAY,
        instructor_id="instructor-1",
        classroom_id="room-1",
    )
    defaults.update(overrides)
    return ScheduleCandidate(start_time=start, end_time=end, **defaults)


# ---------------------------------------------------------------------------
# Overlap predicate
# ---------------------------------------------------------------------------


def test_overlaps_is_strict_at_boundaries():
    """Ranges that only touch do not overlap, in either direction."""
    assert overlaps(540, 600, 600, 660) is False
    assert overlaps(600, 660, 540, 600) is False
    assert overlaps(540, 601, 600, 660) is True


def test_no_overlap():
    existing = [_make_slot("08:00", "09:00")]
    assert find_conflicts("10:00", "11:00", existing) == []


def test_partial_overlap():
    """An existing slot that partially overlaps is returned as a conflict."""
    existing = [_make_slot("09:00", "10:30")]
    conflicts = find_conflicts("10:00", "11:00", existing)
    assert len(conflicts) == 1
    assert conflicts[0].start_time == "09:00"


def test_exact_boundary_no_conflict():
    """When existing.end_time == new start, there is no conflict (back-to-back)."""
    existing = [_make_slot("09:00", "10:00")]
    assert find_conflicts("10:00", "11:00", existing) == []


# ---------------------------------------------------------------------------
# validate()
# ---------------------------------------------------------------------------


def test_touching_slots_produce_no_conflict():
    existing = [_make_slot("09:00", "10:00")]
    report = validate(_make_candidate("10:00", "11:00"), existing, existing)
    assert report.has_conflicts is False
    assert report.conflicts == []
    assert report.conflict_type is None


def test_strict_overlap_attaches_existing_slot():
    existing = _make_slot("09:00", "10:00", title="Math")
    report = validate(_make_candidate("09:30", "10:30", classroom_id=None), [existing], [])

    assert report.has_conflicts is True
    assert len(report.conflicts) == 1
    entry = report.conflicts[0]
    assert entry.resource_kind == ResourceKind.INSTRUCTOR
    assert entry.conflicting_slot == existing
    assert "09:00-10:00" in entry.message
    assert "Math" in entry.message
    assert report.conflict_type == ConflictType.INSTRUCTOR


@pytest.mark.parametrize(
    ("existing", "candidate"),
    [
        (("09:00", "12:00"), ("10:00", "11:00")),  # candidate inside existing
        (("10:00", "11:00"), ("09:00", "12:00")),  # existing inside candidate
        (("09:00", "10:00"), ("09:00", "10:00")),  # identical
    ],
)
def test_containment_conflicts(existing, candidate):
    slot = _make_slot(*existing)
    report = validate(_make_candidate(*candidate, instructor_id=None), [], [slot])
    assert report.has_conflicts is True
    assert [c.resource_kind for c in report.conflicts] == [ResourceKind.CLASSROOM]


def test_missing_dimension_is_skipped_even_with_data():
    """Only instructorId set: classroom snapshot is ignored entirely."""
    clash = _make_slot("09:00", "10:00")
    report = validate(_make_candidate("09:00", "10:00", classroom_id=None), [], [clash])
    assert report.has_conflicts is False


def test_no_resource_ids_never_conflicts():
    clash = _make_slot("09:00", "10:00")
    candidate = _make_candidate("09:00", "10:00", instructor_id=None, classroom_id="")
    report = validate(candidate, [clash], [clash])
    assert report.has_conflicts is False
    assert report.message == "No conflicts."


def test_multiple_conflicts_are_aggregated_in_snapshot_order():
    """Three overlapping instructor slots give three entries, unsorted and not merged."""
    existing = [
        _make_slot("10:30", "11:30", title="C"),
        _make_slot("09:00", "10:00", title="A"),
        _make_slot("09:30", "10:45", title="B"),
    ]
    report = validate(_make_candidate("09:45", "11:00", classroom_id=None), existing, [])
    assert [c.conflicting_slot.title for c in report.conflicts] == ["C", "A", "B"]


def test_instructor_entries_come_before_classroom_entries():
    instructor_clash = _make_slot("09:00", "10:00", title="Instructor busy")
    room_clash = _make_slot("09:30", "10:30", title="Room busy")
    report = validate(_make_candidate("09:00", "11:00"), [instructor_clash], [room_clash])

    assert [c.resource_kind for c in report.conflicts] == [
        ResourceKind.INSTRUCTOR,
        ResourceKind.CLASSROOM,
    ]
    assert report.conflict_type == ConflictType.BOTH


def test_validate_is_deterministic():
    existing = [_make_slot("09:00", "10:00"), _make_slot("09:30", "11:00")]
    candidate = _make_candidate("09:15", "10:15")
    first = validate(candidate, existing, existing)
    second = validate(candidate, existing, existing)
    assert first.model_dump_json() == second.model_dump_json()


# ---------------------------------------------------------------------------
# check_schedule() against the in-memory store
# ---------------------------------------------------------------------------


def _stored(start: str, end: str, **overrides) -> Schedule:
    defaults = dict(
        academy_id="academy-1",
        title="Stored",
        day_of_week=DayOfWeek.MONDAY,
        instructor_id="instructor-1",
        classroom_id="room-1",
    )
    defaults.update(overrides)
    return Schedule(start_time=start, end_time=end, **defaults)


def test_store_scopes_by_academy_day_resource_and_active():
    repo = ScheduleRepository()
    inactive = _stored("09:00", "10:00", title="Inactive")
    inactive.is_active = False
    repo.add(inactive)
    repo.add(_stored("09:00", "10:00", title="Other academy", academy_id="academy-2"))
    repo.add(_stored("09:00", "10:00", title="Tuesday", day_of_week=DayOfWeek.TUESDAY))
    repo.add(_stored("09:00", "10:00", title="Other instructor", instructor_id="x", classroom_id="y"))

    report = check_schedule(repo, _make_candidate("09:00", "10:00"))
    assert report.has_conflicts is False


def test_editing_in_place_does_not_conflict_with_itself():
    repo = ScheduleRepository()
    own = _stored("09:00", "10:00")
    repo.add(own)

    report = check_schedule(repo, _make_candidate("09:00", "10:00", exclude_id=own.id))
    assert report.has_conflicts is False

    report = check_schedule(repo, _make_candidate("09:00", "10:00"))
    assert len(report.conflicts) == 2


def test_store_read_error_propagates():
    class FailingStore:
        def list_active(self, *args, **kwargs):
            raise StoreReadError("connection lost")

    with pytest.raises(StoreReadError):
        check_schedule(FailingStore(), _make_candidate("09:00", "10:00"))


def test_store_not_queried_for_missing_dimension():
    calls = []

    class RecordingStore:
        def list_active(self, academy_id, day_of_week, resource_kind, resource_id, exclude_id=None):
            calls.append(resource_kind)
            return []

    check_schedule(RecordingStore(), _make_candidate("09:00", "10:00", classroom_id=None))
    assert calls == [ResourceKind.INSTRUCTOR]

"""In-memory repositories for academies, presets, schedules and history."""

from __future__ import annotations

from typing import Any

from academy.domain.models import (
    Academy,
    Classroom,
    ClassType,
    DayOfWeek,
    Instructor,
    ResourceKind,
    Schedule,
    ScheduleHistoryEntry,
    ScheduleSlot,
    Subject,
)
from academy.services.timeutil import to_minutes


class AcademyRepository:
    """Dict-backed store for Academy instances, keyed by id."""

    def __init__(self) -> None:
        self._store: dict[str, Academy] = {}

    def add(self, academy: Academy) -> None:
        self._store[academy.id] = academy

    def get(self, academy_id: str) -> Academy | None:
        return self._store.get(academy_id)

    def get_by_code(self, code: str) -> Academy | None:
        """Look up an academy by its code, ignoring case."""
        wanted = code.lower()
        for academy in self._store.values():
            if academy.code.lower() == wanted:
                return academy
        return None

    def search(self, query: str) -> list[Academy]:
        needle = query.strip().lower()
        return [
            a
            for a in self._store.values()
            if needle in a.name.lower() or needle in a.code.lower()
        ]

    def list_all(self) -> list[Academy]:
        return list(self._store.values())


class PresetRepository:
    """Dict-backed store for per-academy presets with soft delete.

    Subclasses only differ in the ordering used by :meth:`list_for_academy`.
    """

    def __init__(self) -> None:
        self._store: dict[str, Any] = {}

    def _sort_key(self, item: Any) -> Any:
        return item.name

    def add(self, item: Any) -> None:
        self._store[item.id] = item

    def get(self, item_id: str) -> Any | None:
        """Return the preset if it exists and has not been deleted."""
        item = self._store.get(item_id)
        if item is None or not item.is_active:
            return None
        return item

    def list_for_academy(self, academy_id: str) -> list[Any]:
        items = [
            i for i in self._store.values() if i.academy_id == academy_id and i.is_active
        ]
        return sorted(items, key=self._sort_key)

    def find_by_name(
        self, academy_id: str, name: str, exclude_id: str | None = None
    ) -> Any | None:
        for item in self._store.values():
            if (
                item.academy_id == academy_id
                and item.is_active
                and item.name == name
                and item.id != exclude_id
            ):
                return item
        return None

    def deactivate(self, item_id: str) -> None:
        item = self._store.get(item_id)
        if item is not None:
            item.is_active = False


class ClassroomRepository(PresetRepository):
    def _sort_key(self, item: Classroom) -> Any:
        # Classrooms without a floor sort last.
        return (item.floor is None, item.floor or 0, item.name)


class InstructorRepository(PresetRepository):
    pass


class SubjectRepository(PresetRepository):
    pass


class ClassTypeRepository(PresetRepository):
    pass


class ScheduleRepository:
    """Insertion-ordered store for Schedule instances.

    Implements the ``ScheduleStore`` contract used by the conflict validator.
    """

    def __init__(self) -> None:
        self._store: dict[str, Schedule] = {}

    def add(self, schedule: Schedule) -> None:
        self._store[schedule.id] = schedule

    def get(self, schedule_id: str) -> Schedule | None:
        """Return the schedule if it exists and is active."""
        schedule = self._store.get(schedule_id)
        if schedule is None or not schedule.is_active:
            return None
        return schedule

    def find(self, schedule_id: str) -> Schedule | None:
        """Return the schedule whether or not it has been deleted."""
        return self._store.get(schedule_id)

    def replace(self, schedule: Schedule) -> None:
        """Swap in an updated copy, keeping the original insertion position."""
        self._store[schedule.id] = schedule

    def deactivate(self, schedule_id: str) -> None:
        schedule = self._store.get(schedule_id)
        if schedule is not None:
            schedule.is_active = False

    def list_filtered(
        self,
        academy_id: str,
        day_of_week: DayOfWeek | None = None,
        instructor_id: str | None = None,
        classroom_id: str | None = None,
        subject_id: str | None = None,
        class_type_id: str | None = None,
    ) -> list[Schedule]:
        """Active schedules of one academy, ordered by day then start time."""
        filters = {
            "day_of_week": day_of_week,
            "instructor_id": instructor_id,
            "classroom_id": classroom_id,
            "subject_id": subject_id,
            "class_type_id": class_type_id,
        }
        result = [
            s
            for s in self._store.values()
            if s.academy_id == academy_id
            and s.is_active
            and all(v is None or getattr(s, k) == v for k, v in filters.items())
        ]
        return sorted(result, key=lambda s: (s.day_of_week.position, to_minutes(s.start_time)))

    def list_active(
        self,
        academy_id: str,
        day_of_week: DayOfWeek,
        resource_kind: ResourceKind,
        resource_id: str,
        exclude_id: str | None = None,
    ) -> list[ScheduleSlot]:
        field = "instructor_id" if resource_kind is ResourceKind.INSTRUCTOR else "classroom_id"
        return [
            s
            for s in self._store.values()
            if s.academy_id == academy_id
            and s.day_of_week == day_of_week
            and getattr(s, field) == resource_id
            and s.is_active
            and s.id != exclude_id
        ]


class ScheduleHistoryRepository:
    """List-backed store for ScheduleHistoryEntry instances."""

    def __init__(self) -> None:
        self._entries: list[ScheduleHistoryEntry] = []

    def add(self, entry: ScheduleHistoryEntry) -> None:
        self._entries.append(entry)

    def list_for_schedule(self, schedule_id: str) -> list[ScheduleHistoryEntry]:
        return sorted(
            [e for e in self._entries if e.schedule_id == schedule_id],
            key=lambda e: e.changed_at,
        )


class Repositories:
    """Every repository the application needs, built once per process."""

    def __init__(self) -> None:
        self.academies = AcademyRepository()
        self.classrooms = ClassroomRepository()
        self.instructors = InstructorRepository()
        self.subjects = SubjectRepository()
        self.class_types = ClassTypeRepository()
        self.schedules = ScheduleRepository()
        self.history = ScheduleHistoryRepository()


# ---------------------------------------------------------------------------
# Seed data – a demo academy with a couple of overlapping-prone schedules
# ---------------------------------------------------------------------------


def _seed_demo_academy(repos: Repositories) -> None:
    academy = Academy(name="Demo Academy", code="DEMO")
    repos.academies.add(academy)

    room_a = Classroom(academy_id=academy.id, name="Room A", capacity=20, floor=1)
    room_b = Classroom(academy_id=academy.id, name="Room B", capacity=12, floor=2)
    kim = Instructor(academy_id=academy.id, name="Kim", specialties=["Math"])
    lee = Instructor(academy_id=academy.id, name="Lee", specialties=["English"])
    math = Subject(academy_id=academy.id, name="Math", color="#FDE68A")
    english = Subject(academy_id=academy.id, name="English", color="#BBF7D0")
    regular = ClassType(academy_id=academy.id, name="Regular")
    for item in (room_a, room_b):
        repos.classrooms.add(item)
    for item in (kim, lee):
        repos.instructors.add(item)
    for item in (math, english):
        repos.subjects.add(item)
    repos.class_types.add(regular)

    repos.schedules.add(
        Schedule(
            academy_id=academy.id,
            title="Math Basics",
            day_of_week=DayOfWeek.MONDAY,
            start_time="09:00",
            end_time="10:30",
            instructor_id=kim.id,
            classroom_id=room_a.id,
            subject_id=math.id,
            class_type_id=regular.id,
            max_students=15,
        )
    )
    repos.schedules.add(
        Schedule(
            academy_id=academy.id,
            title="English Reading",
            day_of_week=DayOfWeek.MONDAY,
            start_time="10:30",
            end_time="12:00",
            instructor_id=lee.id,
            classroom_id=room_a.id,
            subject_id=english.id,
            class_type_id=regular.id,
        )
    )


def create_repositories(seed: bool = False) -> Repositories:
    """Return a fresh set of repositories, optionally pre-loaded with sample data."""
    repos = Repositories()
    if seed:
        _seed_demo_academy(repos)
    return repos

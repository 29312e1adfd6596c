"""Domain models for the academy scheduling system."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from academy.services.timeutil import normalise_time, to_minutes


class DayOfWeek(StrEnum):
    MONDAY = "MONDAY"
    TUESDAY = "TUESDAY"
    WEDNESDAY = "WEDNESDAY"
    THURSDAY = "THURSDAY"
    FRIDAY = "FRIDAY"
    SATURDAY = "SATURDAY"
    SUNDAY = "SUNDAY"

    @classmethod
    def _missing_(cls, value: object) -> DayOfWeek | None:
        # Accept "monday" / " Monday " but never abbreviations.
        if isinstance(value, str):
            return cls.__members__.get(value.strip().upper())
        return None

    @property
    def position(self) -> int:
        return list(DayOfWeek).index(self)


class ResourceKind(StrEnum):
    INSTRUCTOR = "instructor"
    CLASSROOM = "classroom"


class ConflictType(StrEnum):
    INSTRUCTOR = "INSTRUCTOR"
    CLASSROOM = "CLASSROOM"
    BOTH = "BOTH"


class HistoryAction(StrEnum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Tenants and presets
# ---------------------------------------------------------------------------


class Academy(CamelModel):
    id: str = Field(default_factory=_new_id)
    name: str
    code: str
    address: str | None = None
    phone: str | None = None
    email: str | None = None
    created_at: datetime = Field(default_factory=_utcnow)


class Classroom(CamelModel):
    id: str = Field(default_factory=_new_id)
    academy_id: str
    name: str
    capacity: int | None = None
    floor: int | None = None
    location: str | None = None
    is_active: bool = True
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class Instructor(CamelModel):
    id: str = Field(default_factory=_new_id)
    academy_id: str
    name: str
    phone: str | None = None
    email: str | None = None
    specialties: list[str] = Field(default_factory=list)
    bio: str | None = None
    is_active: bool = True
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class Subject(CamelModel):
    id: str = Field(default_factory=_new_id)
    academy_id: str
    name: str
    color: str | None = None
    is_active: bool = True
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class ClassType(CamelModel):
    id: str = Field(default_factory=_new_id)
    academy_id: str
    name: str
    color: str | None = None
    description: str | None = None
    is_active: bool = True
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


# ---------------------------------------------------------------------------
# Schedules
# ---------------------------------------------------------------------------


class _SlotFields(CamelModel):
    academy_id: str
    day_of_week: DayOfWeek
    start_time: str
    end_time: str
    instructor_id: str | None = None
    classroom_id: str | None = None

    @field_validator("day_of_week", mode="before")
    @classmethod
    def _canonical_day(cls, value: object) -> object:
        return DayOfWeek(value) if isinstance(value, str) else value

    @field_validator("start_time", "end_time")
    @classmethod
    def _canonical_time(cls, value: str) -> str:
        return normalise_time(value)


class ScheduleSlot(_SlotFields):
    """A weekly time block as seen by the conflict validator."""

    id: str = Field(default_factory=_new_id)
    is_active: bool = True
    title: str | None = None


class Schedule(ScheduleSlot):
    title: str
    description: str | None = None
    subject_id: str | None = None
    class_type_id: str | None = None
    max_students: int | None = None
    color: str = "#BFDBFE"
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class ScheduleCandidate(_SlotFields):
    """A proposed slot to check; ``exclude_id`` names the slot being edited."""

    exclude_id: str | None = None

    @model_validator(mode="after")
    def _end_after_start(self) -> ScheduleCandidate:
        if to_minutes(self.end_time) <= to_minutes(self.start_time):
            raise ValueError("endTime must be after startTime")
        return self


class ConflictEntry(CamelModel):
    resource_kind: ResourceKind
    message: str
    conflicting_slot: ScheduleSlot


class ConflictReport(CamelModel):
    has_conflicts: bool
    conflicts: list[ConflictEntry] = Field(default_factory=list)
    conflict_type: ConflictType | None = None
    message: str


class ScheduleHistoryEntry(CamelModel):
    id: str = Field(default_factory=_new_id)
    schedule_id: str
    action: HistoryAction
    old_data: dict | None = None
    new_data: dict | None = None
    changed_by: str = "system"
    changed_at: datetime = Field(default_factory=_utcnow)


# ---------------------------------------------------------------------------
# Request DTOs
# ---------------------------------------------------------------------------


class AcademyCreate(CamelModel):
    name: str = Field(min_length=1, max_length=100)
    code: str = Field(min_length=2, max_length=30, pattern=r"^[A-Za-z0-9_-]+$")
    address: str | None = None
    phone: str | None = None
    email: str | None = None


class ClassroomCreate(CamelModel):
    academy_id: str
    name: str = Field(min_length=1, max_length=50)
    capacity: int | None = Field(default=None, gt=0)
    floor: int | None = None
    location: str | None = None


class ClassroomUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1, max_length=50)
    capacity: int | None = Field(default=None, gt=0)
    floor: int | None = None
    location: str | None = None


class InstructorCreate(CamelModel):
    academy_id: str
    name: str = Field(min_length=1, max_length=50)
    phone: str | None = None
    email: str | None = None
    specialties: list[str] = Field(default_factory=list)
    bio: str | None = None


class InstructorUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1, max_length=50)
    phone: str | None = None
    email: str | None = None
    specialties: list[str] | None = None
    bio: str | None = None


class SubjectCreate(CamelModel):
    academy_id: str
    name: str = Field(min_length=1, max_length=50)
    color: str | None = None


class SubjectUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1, max_length=50)
    color: str | None = None


class ClassTypeCreate(CamelModel):
    academy_id: str
    name: str = Field(min_length=1, max_length=50)
    color: str | None = None
    description: str | None = None


class ClassTypeUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1, max_length=50)
    color: str | None = None
    description: str | None = None


class ScheduleCreate(_SlotFields):
    title: str = Field(min_length=1, max_length=100)
    description: str | None = None
    subject_id: str
    class_type_id: str
    instructor_id: str
    classroom_id: str
    max_students: int | None = Field(default=None, gt=0)
    color: str | None = None

    @model_validator(mode="after")
    def _end_after_start(self) -> ScheduleCreate:
        if to_minutes(self.end_time) <= to_minutes(self.start_time):
            raise ValueError("endTime must be after startTime")
        return self


class ScheduleUpdate(CamelModel):
    """Partial update; the merged result is re-checked by the route."""

    title: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = None
    day_of_week: DayOfWeek | None = None
    start_time: str | None = None
    end_time: str | None = None
    subject_id: str | None = None
    class_type_id: str | None = None
    instructor_id: str | None = None
    classroom_id: str | None = None
    max_students: int | None = Field(default=None, gt=0)
    color: str | None = None

    @field_validator("day_of_week", mode="before")
    @classmethod
    def _canonical_day(cls, value: object) -> object:
        return DayOfWeek(value) if isinstance(value, str) else value

    @field_validator("start_time", "end_time")
    @classmethod
    def _canonical_time(cls, value: str | None) -> str | None:
        return normalise_time(value) if value is not None else None

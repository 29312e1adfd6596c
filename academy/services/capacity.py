"""Check a class's enrolment limit against its classroom."""

from __future__ import annotations

from academy.domain.models import Classroom


def check_capacity(classroom: Classroom, max_students: int | None) -> str | None:
    """Return an error message if *max_students* does not fit in *classroom*.

    ``None`` means the limit is acceptable (or there is nothing to check).
    """
    if not max_students or classroom.capacity is None:
        return None
    if max_students > classroom.capacity:
        return (
            f"{classroom.name} holds at most {classroom.capacity} students; "
            f"set maxStudents to {classroom.capacity} or fewer."
        )
    return None

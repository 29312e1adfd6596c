"""CRUD routes for per-academy presets: classrooms, instructors, subjects, class types."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from academy.api.deps import get_repos
from academy.api.responses import success
from academy.domain.errors import ApiError
from academy.domain.models import (
    Classroom,
    ClassroomCreate,
    ClassroomUpdate,
    ClassType,
    ClassTypeCreate,
    ClassTypeUpdate,
    Instructor,
    InstructorCreate,
    InstructorUpdate,
    Subject,
    SubjectCreate,
    SubjectUpdate,
)
from academy.repos.memory import Repositories, PresetRepository

logger = logging.getLogger(__name__)

classrooms_router = APIRouter()
instructors_router = APIRouter()
subjects_router = APIRouter()
class_types_router = APIRouter()


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def _require_academy(repos: Repositories, academy_id: str) -> None:
    if repos.academies.get(academy_id) is None:
        raise ApiError(404, "Academy not found.")


def _get_or_404(repo: PresetRepository, item_id: str, label: str) -> Any:
    item = repo.get(item_id)
    if item is None:
        raise ApiError(404, f"{label.capitalize()} not found.")
    return item


def _create(repo: PresetRepository, item: Any, label: str):
    if repo.find_by_name(item.academy_id, item.name) is not None:
        raise ApiError(409, f"A {label} named '{item.name}' already exists.")
    repo.add(item)
    logger.info("Created %s %s in academy %s", label, item.id, item.academy_id)
    return success(item, f"{label.capitalize()} created.", status_code=201)


# Fields an explicit null may not clear.
_NON_NULLABLE = ("name", "specialties")


def _update(repo: PresetRepository, item_id: str, payload: BaseModel, label: str):
    item = _get_or_404(repo, item_id, label)
    changes = payload.model_dump(exclude_unset=True)
    for key in _NON_NULLABLE:
        if key in changes and changes[key] is None:
            del changes[key]
    if "name" in changes and repo.find_by_name(item.academy_id, changes["name"], exclude_id=item.id):
        raise ApiError(409, f"A {label} named '{changes['name']}' already exists.")

    updated = item.model_copy(update={**changes, "updated_at": datetime.now(timezone.utc)})
    repo.add(updated)
    return success(updated, f"{label.capitalize()} updated.")


def _delete(repos: Repositories, repo: PresetRepository, item_id: str, label: str, field: str):
    """Soft delete, refused while an active schedule still references the preset."""
    item = _get_or_404(repo, item_id, label)
    in_use = repos.schedules.list_filtered(item.academy_id, **{field: item_id})
    if in_use:
        raise ApiError(400, f"This {label} is used by {len(in_use)} active schedule(s) and cannot be deleted.")
    repo.deactivate(item_id)
    logger.info("Deactivated %s %s", label, item_id)
    return success({"id": item_id}, f"{label.capitalize()} deleted.")


# ---------------------------------------------------------------------------
# Classrooms
# ---------------------------------------------------------------------------


@classrooms_router.get("")
def list_classrooms(academy_id: str = Query(alias="academyId"), repos: Repositories = Depends(get_repos)):
    """Active classrooms ordered by floor, then name."""
    items = repos.classrooms.list_for_academy(academy_id)
    return success(items, f"Found {len(items)} classrooms.")


@classrooms_router.post("")
def create_classroom(payload: ClassroomCreate, repos: Repositories = Depends(get_repos)):
    _require_academy(repos, payload.academy_id)
    return _create(repos.classrooms, Classroom(**payload.model_dump()), "classroom")


@classrooms_router.get("/{classroom_id}")
def get_classroom(classroom_id: str, repos: Repositories = Depends(get_repos)):
    return success(_get_or_404(repos.classrooms, classroom_id, "classroom"))


@classrooms_router.put("/{classroom_id}")
def update_classroom(classroom_id: str, payload: ClassroomUpdate, repos: Repositories = Depends(get_repos)):
    return _update(repos.classrooms, classroom_id, payload, "classroom")


@classrooms_router.delete("/{classroom_id}")
def delete_classroom(classroom_id: str, repos: Repositories = Depends(get_repos)):
    return _delete(repos, repos.classrooms, classroom_id, "classroom", "classroom_id")


# ---------------------------------------------------------------------------
# Instructors
# ---------------------------------------------------------------------------


@instructors_router.get("")
def list_instructors(academy_id: str = Query(alias="academyId"), repos: Repositories = Depends(get_repos)):
    items = repos.instructors.list_for_academy(academy_id)
    return success(items, f"Found {len(items)} instructors.")


@instructors_router.post("")
def create_instructor(payload: InstructorCreate, repos: Repositories = Depends(get_repos)):
    _require_academy(repos, payload.academy_id)
    return _create(repos.instructors, Instructor(**payload.model_dump()), "instructor")


@instructors_router.get("/{instructor_id}")
def get_instructor(instructor_id: str, repos: Repositories = Depends(get_repos)):
    return success(_get_or_404(repos.instructors, instructor_id, "instructor"))


@instructors_router.put("/{instructor_id}")
def update_instructor(instructor_id: str, payload: InstructorUpdate, repos: Repositories = Depends(get_repos)):
    return _update(repos.instructors, instructor_id, payload, "instructor")


@instructors_router.delete("/{instructor_id}")
def delete_instructor(instructor_id: str, repos: Repositories = Depends(get_repos)):
    return _delete(repos, repos.instructors, instructor_id, "instructor", "instructor_id")


# ---------------------------------------------------------------------------
# Subjects
# ---------------------------------------------------------------------------


@subjects_router.get("")
def list_subjects(academy_id: str = Query(alias="academyId"), repos: Repositories = Depends(get_repos)):
    items = repos.subjects.list_for_academy(academy_id)
    return success(items, f"Found {len(items)} subjects.")


@subjects_router.post("")
def create_subject(payload: SubjectCreate, repos: Repositories = Depends(get_repos)):
    _require_academy(repos, payload.academy_id)
    return _create(repos.subjects, Subject(**payload.model_dump()), "subject")


@subjects_router.get("/{subject_id}")
def get_subject(subject_id: str, repos: Repositories = Depends(get_repos)):
    return success(_get_or_404(repos.subjects, subject_id, "subject"))


@subjects_router.put("/{subject_id}")
def update_subject(subject_id: str, payload: SubjectUpdate, repos: Repositories = Depends(get_repos)):
    return _update(repos.subjects, subject_id, payload, "subject")


@subjects_router.delete("/{subject_id}")
def delete_subject(subject_id: str, repos: Repositories = Depends(get_repos)):
    return _delete(repos, repos.subjects, subject_id, "subject", "subject_id")


# ---------------------------------------------------------------------------
# Class types
# ---------------------------------------------------------------------------


@class_types_router.get("")
def list_class_types(academy_id: str = Query(alias="academyId"), repos: Repositories = Depends(get_repos)):
    items = repos.class_types.list_for_academy(academy_id)
    return success(items, f"Found {len(items)} class types.")


@class_types_router.post("")
def create_class_type(payload: ClassTypeCreate, repos: Repositories = Depends(get_repos)):
    _require_academy(repos, payload.academy_id)
    return _create(repos.class_types, ClassType(**payload.model_dump()), "class type")


@class_types_router.get("/{class_type_id}")
def get_class_type(class_type_id: str, repos: Repositories = Depends(get_repos)):
    return success(_get_or_404(repos.class_types, class_type_id, "class type"))


@class_types_router.put("/{class_type_id}")
def update_class_type(class_type_id: str, payload: ClassTypeUpdate, repos: Repositories = Depends(get_repos)):
    return _update(repos.class_types, class_type_id, payload, "class type")


@class_types_router.delete("/{class_type_id}")
def delete_class_type(class_type_id: str, repos: Repositories = Depends(get_repos)):
    return _delete(repos, repos.class_types, class_type_id, "class type", "class_type_id")

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query

from academy.api.deps import get_repos
from academy.api.responses import success
from academy.domain.errors import ApiError
from academy.domain.models import Academy, AcademyCreate
from academy.repos.memory import Repositories

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("")
def register_academy(payload: AcademyCreate, repos: Repositories = Depends(get_repos)):
    """Register a new academy; codes are unique regardless of case."""
    if repos.academies.get_by_code(payload.code) is not None:
        raise ApiError(409, f"Academy code '{payload.code}' is already in use.")

    academy = Academy(**payload.model_dump())
    repos.academies.add(academy)
    logger.info("Registered academy %s (%s)", academy.code, academy.id)
    return success(academy, "Academy registered.", status_code=201)


@router.get("/search")
def search_academies(
    q: str = Query(min_length=1, max_length=100),
    repos: Repositories = Depends(get_repos),
):
    results = repos.academies.search(q)
    return success(results, f"Found {len(results)} academies.")


@router.get("/{code}")
def get_academy(code: str, repos: Repositories = Depends(get_repos)):
    academy = repos.academies.get_by_code(code)
    if academy is None:
        raise ApiError(404, "Academy not found.")
    return success(academy)

"""FastAPI application: entry point for the academy scheduling service."""

from __future__ import annotations

from fastapi import FastAPI

from academy.api import academies, presets, schedules
from academy.api.responses import register_exception_handlers
from academy.core.config import Settings, settings
from academy.core.logger import setup_logging
from academy.domain.bus import EventBus
from academy.domain.handlers import HandlerRegistry
from academy.middleware.log_middleware import LogMiddleware
from academy.repos.memory import Repositories, create_repositories


def create_app(
    app_settings: Settings | None = None,
    repos: Repositories | None = None,
) -> FastAPI:
    """Build the application with its own repositories and event bus.

    Pass *repos* to inject a pre-built store (tests do this); otherwise a fresh
    in-memory set is created, seeded when ``SEED_DEMO_DATA`` is on.
    """
    app_settings = app_settings or settings
    setup_logging(app_settings.LOG_LEVEL)

    if repos is None:
        repos = create_repositories(seed=app_settings.SEED_DEMO_DATA)
    bus = EventBus()
    HandlerRegistry(bus=bus, schedule_repo=repos.schedules, history_repo=repos.history)

    app = FastAPI(title=app_settings.PROJECT_NAME)
    app.state.settings = app_settings
    app.state.repos = repos
    app.state.bus = bus

    app.add_middleware(LogMiddleware)
    register_exception_handlers(app, debug=app_settings.DEBUG)

    prefix = app_settings.API_PREFIX
    app.include_router(academies.router, prefix=f"{prefix}/academies", tags=["academies"])
    app.include_router(presets.classrooms_router, prefix=f"{prefix}/classrooms", tags=["classrooms"])
    app.include_router(presets.instructors_router, prefix=f"{prefix}/instructors", tags=["instructors"])
    app.include_router(presets.subjects_router, prefix=f"{prefix}/subjects", tags=["subjects"])
    app.include_router(presets.class_types_router, prefix=f"{prefix}/class-types", tags=["class-types"])
    app.include_router(schedules.router, prefix=f"{prefix}/schedules", tags=["schedules"])

    @app.get("/")
    def root() -> dict:
        return {"message": f"Welcome to {app_settings.PROJECT_NAME}"}

    return app


app = create_app()

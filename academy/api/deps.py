from fastapi import Request

from academy.core.config import Settings
from academy.domain.bus import EventBus
from academy.repos.memory import Repositories


def get_repos(request: Request) -> Repositories:
    return request.app.state.repos


def get_bus(request: Request) -> EventBus:
    return request.app.state.bus


def get_settings(request: Request) -> Settings:
    return request.app.state.settings

"""Tests for the schedule event bus: handlers and change history."""

from __future__ import annotations

import logging

import pytest

from academy.domain.bus import EventBus
from academy.domain.events import (
    ConflictDetected,
    ScheduleCreated,
    ScheduleDeactivated,
    ScheduleUpdated,
)
from academy.domain.handlers import HandlerRegistry, history_snapshot
from academy.domain.models import ConflictType, DayOfWeek, HistoryAction, Schedule
from academy.repos.memory import ScheduleHistoryRepository, ScheduleRepository


@pytest.fixture()
def env():
    """Fresh bus + repos + registry for each test."""
    bus = EventBus()
    schedule_repo = ScheduleRepository()
    history_repo = ScheduleHistoryRepository()
    registry = HandlerRegistry(bus=bus, schedule_repo=schedule_repo, history_repo=history_repo)

    class Env:
        pass

    e = Env()
    e.bus = bus
    e.schedule_repo = schedule_repo
    e.history_repo = history_repo
    e.registry = registry
    return e


def _make_schedule(**overrides) -> Schedule:
    defaults = dict(
        academy_id="academy-1",
        title="Chemistry",
        day_of_week=DayOfWeek.WEDNESDAY,
        start_time="14:00",
        end_time="15:30",
        instructor_id="instructor-1",
        classroom_id="room-1",
    )
    defaults.update(overrides)
    return Schedule(**defaults)


def test_bus_calls_handlers_in_registration_order():
    bus = EventBus()
    seen = []
    bus.subscribe(ScheduleCreated, lambda e: seen.append(("first", e.schedule_id)))
    bus.subscribe(ScheduleCreated, lambda e: seen.append(("second", e.schedule_id)))
    bus.publish(ScheduleCreated(schedule_id="s1"))
    bus.publish(ScheduleDeactivated(schedule_id="s1"))  # no subscribers
    assert seen == [("first", "s1"), ("second", "s1")]


def test_created_records_history(env):
    schedule = _make_schedule()
    env.schedule_repo.add(schedule)

    env.bus.publish(ScheduleCreated(schedule_id=schedule.id, changed_by="admin"))

    entries = env.history_repo.list_for_schedule(schedule.id)
    assert len(entries) == 1
    assert entries[0].action == HistoryAction.CREATE
    assert entries[0].changed_by == "admin"
    assert entries[0].old_data is None
    assert entries[0].new_data["dayOfWeek"] == "WEDNESDAY"
    assert entries[0].new_data["startTime"] == "14:00"


def test_updated_records_old_and_new(env):
    original = _make_schedule()
    env.schedule_repo.add(original)
    edited = original.model_copy(update={"start_time": "13:00"})
    env.schedule_repo.replace(edited)

    env.bus.publish(ScheduleUpdated(schedule_id=original.id, old_data=history_snapshot(original)))

    (entry,) = env.history_repo.list_for_schedule(original.id)
    assert entry.action == HistoryAction.UPDATE
    assert entry.old_data["startTime"] == "14:00"
    assert entry.new_data["startTime"] == "13:00"


def test_deactivated_records_history_for_inactive_schedule(env):
    schedule = _make_schedule()
    env.schedule_repo.add(schedule)
    env.schedule_repo.deactivate(schedule.id)

    env.bus.publish(ScheduleDeactivated(schedule_id=schedule.id))

    (entry,) = env.history_repo.list_for_schedule(schedule.id)
    assert entry.action == HistoryAction.DELETE
    assert entry.old_data["title"] == "Chemistry"


def test_events_for_unknown_schedule_are_ignored(env):
    env.bus.publish(ScheduleCreated(schedule_id="missing"))
    env.bus.publish(ScheduleDeactivated(schedule_id="missing"))
    assert env.history_repo.list_for_schedule("missing") == []


def test_conflict_detected_logs_warning(env, caplog):
    with caplog.at_level(logging.WARNING, logger="academy"):
        env.bus.publish(
            ConflictDetected(
                schedule_id="new",
                conflict_type=ConflictType.BOTH,
                conflicting_schedule_ids=["a", "b"],
            )
        )
    assert "new" in caplog.text
    assert "a, b" in caplog.text

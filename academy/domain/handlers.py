"""Domain event handlers, wired up when the application is created."""

from __future__ import annotations

import logging

from academy.domain.bus import EventBus
from academy.domain.events import (
    ConflictDetected,
    ScheduleCreated,
    ScheduleDeactivated,
    ScheduleUpdated,
)
from academy.domain.models import HistoryAction, Schedule, ScheduleHistoryEntry
from academy.repos.memory import ScheduleHistoryRepository, ScheduleRepository

logger = logging.getLogger(__name__)

_TRACKED_FIELDS = (
    "title",
    "day_of_week",
    "start_time",
    "end_time",
    "instructor_id",
    "classroom_id",
    "subject_id",
    "class_type_id",
    "max_students",
)


def history_snapshot(schedule: Schedule) -> dict:
    """The subset of a schedule recorded in its change history."""
    return schedule.model_dump(include=set(_TRACKED_FIELDS), by_alias=True, mode="json")


class HandlerRegistry:
    """Wires schedule domain-event handlers to the bus."""

    def __init__(
        self,
        bus: EventBus,
        schedule_repo: ScheduleRepository,
        history_repo: ScheduleHistoryRepository,
    ) -> None:
        self.bus = bus
        self.schedule_repo = schedule_repo
        self.history_repo = history_repo
        self._register()

    def _register(self) -> None:
        self.bus.subscribe(ScheduleCreated, self.on_schedule_created)
        self.bus.subscribe(ScheduleUpdated, self.on_schedule_updated)
        self.bus.subscribe(ScheduleDeactivated, self.on_schedule_deactivated)
        self.bus.subscribe(ConflictDetected, self.on_conflict_detected)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def on_schedule_created(self, event: ScheduleCreated) -> None:
        stored = self.schedule_repo.get(event.schedule_id)
        if stored is None:
            return

        self.history_repo.add(
            ScheduleHistoryEntry(
                schedule_id=stored.id,
                action=HistoryAction.CREATE,
                new_data=history_snapshot(stored),
                changed_by=event.changed_by,
            )
        )

    def on_schedule_updated(self, event: ScheduleUpdated) -> None:
        stored = self.schedule_repo.get(event.schedule_id)
        if stored is None:
            return

        self.history_repo.add(
            ScheduleHistoryEntry(
                schedule_id=stored.id,
                action=HistoryAction.UPDATE,
                old_data=event.old_data,
                new_data=history_snapshot(stored),
                changed_by=event.changed_by,
            )
        )

    def on_schedule_deactivated(self, event: ScheduleDeactivated) -> None:
        # Inactive by now, so bypass the active filter of get().
        stored = self.schedule_repo.find(event.schedule_id)
        if stored is None:
            return

        self.history_repo.add(
            ScheduleHistoryEntry(
                schedule_id=stored.id,
                action=HistoryAction.DELETE,
                old_data=history_snapshot(stored),
                changed_by=event.changed_by,
            )
        )

    def on_conflict_detected(self, event: ConflictDetected) -> None:
        logger.warning(
            "Schedule %s saved with %s conflict(s) against %s",
            event.schedule_id,
            event.conflict_type,
            ", ".join(event.conflicting_schedule_ids),
        )

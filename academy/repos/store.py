"""Query contract the conflict validator needs from a schedule store."""

from __future__ import annotations

from typing import Protocol

from academy.domain.models import DayOfWeek, ResourceKind, ScheduleSlot


class ScheduleStore(Protocol):
    def list_active(
        self,
        academy_id: str,
        day_of_week: DayOfWeek,
        resource_kind: ResourceKind,
        resource_id: str,
        exclude_id: str | None = None,
    ) -> list[ScheduleSlot]:
        """Return active slots of one academy, day and resource, in persistence order.

        ``exclude_id`` removes that slot from the result. Implementations raise
        :class:`academy.domain.errors.StoreReadError` when the read fails.
        """
        ...

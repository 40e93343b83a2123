"""Assignment store port — the storage operations the reminder job needs."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from trackademic.data.models import Assignment, Threshold


class AssignmentStorePort(Protocol):
    """Abstract assignment store used by the reminder dispatcher."""

    def find_reminder_candidates(
        self, threshold: Threshold, now: datetime
    ) -> list[Assignment]: ...

    def set_reminder_flag(self, assignment_id: str, threshold: Threshold) -> bool: ...

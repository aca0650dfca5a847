"""Mutable per-session engine state."""

from datetime import datetime
from pydantic import BaseModel


class EngineState(BaseModel):
    """Run state of one analyzer session (one symbol/timeframe).

    Only SignalAnalyzer lifecycle methods mutate this object, and only
    one evaluation may run against it at a time.
    """

    is_running: bool = False
    started_at: datetime | None = None
    last_alert_at: datetime | None = None
    startup_guard_until: datetime | None = None

    def is_guarded(self, now: datetime) -> bool:
        """Check if the startup guard is still active at *now*."""
        return self.startup_guard_until is not None and now < self.startup_guard_until

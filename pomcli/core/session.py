from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Protocol

from pomcli.config import DEFAULT_DURATION_MINUTES, MAX_DURATION_MINUTES
from pomcli.core.timer import SessionState, classify, remaining_seconds
from pomcli.data.storage import TimerRecord


logger = logging.getLogger(__name__)


class InvalidDurationError(ValueError):
    """Requested duration is not a positive whole number of minutes."""


class RecordStore(Protocol):
    def load(self) -> TimerRecord | None: ...

    def save(self, record: TimerRecord) -> None: ...


class SessionOutcome(str, Enum):
    STARTED = "started"
    RESUMED = "resumed"
    EXPIRED_THEN_STARTED = "expired_then_started"


@dataclass(frozen=True)
class SessionStatus:
    outcome: SessionOutcome
    record: TimerRecord
    duration_seconds: int
    remaining_seconds: float
    restarted: bool = False
    previous: TimerRecord | None = None
    persisted: bool = True


def validate_duration(duration_minutes: int | None) -> int:
    """Returns the duration in seconds for a new session, or raises `InvalidDurationError`."""
    if duration_minutes is None:
        return DEFAULT_DURATION_MINUTES * 60
    if isinstance(duration_minutes, bool) or not isinstance(duration_minutes, int):
        raise InvalidDurationError(f"Duration must be a whole number of minutes, got {duration_minutes!r}")
    if duration_minutes <= 0:
        raise InvalidDurationError(f"Duration must be positive, got {duration_minutes}")
    if duration_minutes > MAX_DURATION_MINUTES:
        raise InvalidDurationError(f"Duration must be at most {MAX_DURATION_MINUTES} minutes, got {duration_minutes}")
    return duration_minutes * 60


class SessionController:
    """Decides on each invocation whether to resume the stored session or start a new one."""

    def __init__(self, store: RecordStore) -> None:
        self._store = store

    def run(self, now: float, restart: bool = False, duration_minutes: int | None = None) -> SessionStatus:
        new_duration = validate_duration(duration_minutes)
        previous = self._store.load()
        state = classify(previous, now)

        if restart:
            status = self._start(now, new_duration, SessionOutcome.STARTED, restarted=True, previous=previous)
            logger.info("Restarting: new %ds pomodoro (state was %s)", new_duration, state.value)
        elif previous is None:
            status = self._start(now, new_duration, SessionOutcome.STARTED)
            logger.info("Starting new %ds pomodoro", new_duration)
        elif state == SessionState.EXPIRED:
            status = self._start(now, new_duration, SessionOutcome.EXPIRED_THEN_STARTED, previous=previous)
            logger.info("Previous pomodoro finished; starting new %ds pomodoro", new_duration)
        else:
            if duration_minutes is not None and new_duration != previous.duration_seconds:
                logger.debug("Ignoring duration %dm for the active session", duration_minutes)
            status = SessionStatus(
                outcome=SessionOutcome.RESUMED,
                record=previous,
                duration_seconds=previous.duration_seconds,
                remaining_seconds=min(float(previous.duration_seconds), remaining_seconds(previous, now)),
                previous=previous,
            )
            logger.info("Continuing pomodoro, %ds remaining", int(status.remaining_seconds))

        return self._persist(status)

    def _start(
        self,
        now: float,
        duration_seconds: int,
        outcome: SessionOutcome,
        restarted: bool = False,
        previous: TimerRecord | None = None,
    ) -> SessionStatus:
        record = TimerRecord(started_at=float(now), duration_seconds=duration_seconds)
        return SessionStatus(
            outcome=outcome,
            record=record,
            duration_seconds=duration_seconds,
            remaining_seconds=float(duration_seconds),
            restarted=restarted,
            previous=previous,
        )

    def _persist(self, status: SessionStatus) -> SessionStatus:
        try:
            self._store.save(status.record)
        except OSError as exc:
            logger.warning("Could not save session state: %s", exc)
            return replace(status, persisted=False)
        return status

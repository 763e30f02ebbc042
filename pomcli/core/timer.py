from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pomcli.data.storage import TimerRecord


class SessionState(str, Enum):
    ABSENT = "absent"
    ACTIVE = "active"
    EXPIRED = "expired"


@dataclass(frozen=True)
class TimerSnapshot:
    total_seconds: int
    remaining_seconds: int
    elapsed_seconds: int
    progress: float
    state: SessionState
    ends_at: float


def classify(record: TimerRecord | None, now: float) -> SessionState:
    if record is None:
        return SessionState.ABSENT
    if now >= record.ends_at:
        return SessionState.EXPIRED
    return SessionState.ACTIVE


def remaining_seconds(record: TimerRecord, now: float) -> float:
    """Unclamped seconds left in the session; negative once it has expired."""
    return record.duration_seconds - (now - record.started_at)


def snapshot(record: TimerRecord, now: float) -> TimerSnapshot:
    """Wall-clock view of a persisted session, detached from any UI."""
    total = record.duration_seconds
    # a clock stepped backwards counts as no time elapsed
    elapsed = min(float(total), max(0.0, now - record.started_at))
    elapsed_seconds = int(elapsed)
    return TimerSnapshot(
        total_seconds=total,
        remaining_seconds=max(0, total - elapsed_seconds),
        elapsed_seconds=elapsed_seconds,
        progress=max(0.0, min(1.0, elapsed / total)),
        state=classify(record, now),
        ends_at=record.ends_at,
    )

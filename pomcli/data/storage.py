from __future__ import annotations

"""Файловое хранилище единственной записи таймера с атомарной заменой."""

import json
import logging
import math
import os
import tempfile
from dataclasses import asdict, dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

from pomcli.config import MAX_DURATION_MINUTES


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimerRecord:
    started_at: float
    duration_seconds: int

    @property
    def ends_at(self) -> float:
        return self.started_at + self.duration_seconds


def _record_from_payload(payload: Any) -> TimerRecord | None:
    if not isinstance(payload, dict):
        return None
    started_at = payload.get("started_at")
    duration = payload.get("duration_seconds")
    # bool is an int subclass; reject it for both fields
    if isinstance(started_at, bool) or not isinstance(started_at, (int, float)):
        return None
    if isinstance(duration, bool) or not isinstance(duration, int):
        return None
    if not math.isfinite(started_at) or duration <= 0 or duration > MAX_DURATION_MINUTES * 60:
        return None
    record = TimerRecord(started_at=float(started_at), duration_seconds=duration)
    # the end of the session must be a representable local time
    try:
        datetime.fromtimestamp(record.ends_at)
    except (OverflowError, ValueError, OSError):
        return None
    return record


class SessionStore:
    """Хранит ноль или одну запись `TimerRecord` в JSON-файле по фиксированному пути."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> TimerRecord | None:
        """Возвращает сохраненную запись или `None`, если файла нет или он поврежден."""
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            logger.warning("Cannot read state file %s: %s", self.path, exc)
            return None
        try:
            payload = json.loads(raw)
        except ValueError:
            # JSONDecodeError, UnicodeDecodeError and the int digit limit all land here
            logger.warning("State file %s is not valid JSON, ignoring it", self.path)
            return None
        record = _record_from_payload(payload)
        if record is None:
            logger.warning("State file %s has an unexpected layout, ignoring it", self.path)
        return record

    def save(self, record: TimerRecord) -> None:
        """Атомарно заменяет запись: пишет во временный файл и переименовывает его."""
        payload = json.dumps(asdict(record))
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f"{self.path.name}.", suffix=".tmp", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, self.path)
        except Exception:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise
        logger.debug("Saved %s to %s", record, self.path)

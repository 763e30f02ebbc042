from __future__ import annotations

import time
from datetime import datetime
from pathlib import Path
from typing import Callable

from rich.console import Console
from rich.progress import BarColumn, Progress, TextColumn

from pomcli.core.session import SessionOutcome, SessionStatus
from pomcli.core.timer import SessionState, snapshot
from pomcli.data.storage import TimerRecord


NEW_SYMBOL = "🍅"
RESUMED_SYMBOL = "🍏"

STATUS_STYLES = {
    SessionOutcome.STARTED: "bold red",
    SessionOutcome.RESUMED: "bold green",
    SessionOutcome.EXPIRED_THEN_STARTED: "bold red",
}


def status_symbol(outcome: SessionOutcome) -> str:
    return RESUMED_SYMBOL if outcome == SessionOutcome.RESUMED else NEW_SYMBOL


def format_duration(seconds: float) -> str:
    """Human readable span: `25m`, `12m 03s`, `1h 05m`, `45s`."""
    total = max(0, int(seconds))
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}h {minutes:02d}m"
    if minutes and secs:
        return f"{minutes}m {secs:02d}s"
    if minutes:
        return f"{minutes}m"
    return f"{secs}s"


def format_clock(seconds: float) -> str:
    total = max(0, int(seconds))
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes:02d}:{secs:02d}"


def format_time_of_day(timestamp: float, with_seconds: bool = False) -> str:
    return datetime.fromtimestamp(timestamp).strftime("%H:%M:%S" if with_seconds else "%H:%M")


def status_message(status: SessionStatus) -> str:
    ends = format_time_of_day(status.record.ends_at)
    length = format_duration(status.duration_seconds)
    if status.outcome == SessionOutcome.RESUMED:
        remaining = format_duration(status.remaining_seconds)
        return f"{RESUMED_SYMBOL} Continuing pomodoro: {remaining} remaining (ends at {ends})"
    if status.outcome == SessionOutcome.EXPIRED_THEN_STARTED:
        return f"{NEW_SYMBOL} Previous pomodoro finished; started new {length} pomodoro (ends at {ends})"
    if status.restarted:
        return f"{NEW_SYMBOL} Restarted: new {length} pomodoro (ends at {ends})"
    return f"{NEW_SYMBOL} Started new {length} pomodoro (ends at {ends})"


def save_warning(state_path: str | Path | None = None) -> str:
    where = f" to {state_path}" if state_path else ""
    return f"Warning: could not save session state{where}; this pomodoro may not resume next time."


def print_status(console: Console, status: SessionStatus, state_path: str | Path | None = None) -> None:
    console.print(status_message(status), style=STATUS_STYLES[status.outcome], markup=False, highlight=False, soft_wrap=True)
    if not status.persisted:
        console.print(save_warning(state_path), style="yellow", markup=False, highlight=False, soft_wrap=True)


def watch(
    console: Console,
    record: TimerRecord,
    symbol: str = NEW_SYMBOL,
    clock: Callable[[], float] = time.time,
    sleep: Callable[[float], None] = time.sleep,
) -> bool:
    """Follows the countdown until it ends; returns False if interrupted with Ctrl+C."""
    current = snapshot(record, clock())
    columns = (
        TextColumn("{task.description}"),
        BarColumn(bar_width=None, complete_style="red", finished_style="red"),
        TextColumn("[{task.fields[remaining]}]", markup=False),
    )
    try:
        with Progress(*columns, console=console, transient=True) as progress:
            task = progress.add_task(
                symbol,
                total=current.total_seconds,
                completed=current.elapsed_seconds,
                remaining=format_clock(current.remaining_seconds),
            )
            while current.state == SessionState.ACTIVE:
                sleep(1)
                current = snapshot(record, clock())
                progress.update(
                    task,
                    completed=current.elapsed_seconds,
                    remaining=format_clock(current.remaining_seconds),
                )
    except KeyboardInterrupt:
        now = clock()
        left = format_duration(snapshot(record, now).remaining_seconds)
        console.print(f"Interrupted at {format_time_of_day(now, with_seconds=True)} with {left} remaining.", markup=False, soft_wrap=True)
        return False
    console.print(f"Finished at {format_time_of_day(clock(), with_seconds=True)}", markup=False, soft_wrap=True)
    return True

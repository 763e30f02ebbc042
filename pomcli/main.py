from __future__ import annotations

"""Точка входа pomcli.

Модуль разбирает аргументы командной строки, подключает файловое хранилище,
решает, продолжить ли прерванный помидор или начать новый, и выводит статус.
"""

import argparse
import logging
import time
from pathlib import Path
from typing import Callable

from rich.console import Console

from pomcli.config import DEFAULT_DURATION_MINUTES, VERSION, default_log_path, default_state_path
from pomcli.core.session import InvalidDurationError, SessionController
from pomcli.data.storage import SessionStore
from pomcli.logging_setup import setup_logging
from pomcli.ui.console import print_status, status_symbol, watch


logger = logging.getLogger("pomcli.main")

EXIT_OK = 0
EXIT_INVALID_INPUT = 2
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pomcli",
        description="Start a new pomodoro, or continue the last one if it is still running.",
    )
    parser.add_argument(
        "-d",
        "--duration",
        type=int,
        default=None,
        help=f"duration in minutes for a new pomodoro (default: {DEFAULT_DURATION_MINUTES})",
    )
    parser.add_argument("-r", "--restart", action="store_true", help="discard the current pomodoro and start a new one")
    parser.add_argument("-w", "--watch", action="store_true", help="show a progress bar until the pomodoro ends")
    parser.add_argument("--state-file", type=Path, default=None, help="where the running pomodoro is saved")
    parser.add_argument("--log-file", type=Path, default=None, help="where activity is logged")
    parser.add_argument("-v", "--verbose", action="store_true", help="log debug details")
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    return parser


def main(
    argv: list[str] | None = None,
    clock: Callable[[], float] = time.time,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """Собирает зависимости, применяет правила сессии и возвращает код выхода."""
    args = build_parser().parse_args(argv)
    setup_logging(args.log_file or default_log_path(), verbose=args.verbose)

    state_path = args.state_file or default_state_path()
    controller = SessionController(SessionStore(state_path))
    console = Console()

    try:
        status = controller.run(now=clock(), restart=args.restart, duration_minutes=args.duration)
    except InvalidDurationError as exc:
        logger.error("Rejected input: %s", exc)
        Console(stderr=True).print(f"pomcli: error: {exc}", style="bold red", markup=False, highlight=False)
        return EXIT_INVALID_INPUT

    print_status(console, status, state_path)
    if not args.watch:
        return EXIT_OK

    if watch(console, status.record, symbol=status_symbol(status.outcome), clock=clock, sleep=sleep):
        logger.info("Finished pomodoro")
        return EXIT_OK
    logger.info("Interrupted pomodoro, it stays saved in %s", state_path)
    return EXIT_INTERRUPTED


if __name__ == "__main__":
    raise SystemExit(main())

import json

import pytest

from pomcli.main import EXIT_INTERRUPTED, EXIT_INVALID_INPUT, EXIT_OK, main


class FakeClock:
    def __init__(self, now: float) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("POMCLI_STATE_FILE", raising=False)
    monkeypatch.delenv("POMCLI_LOG_FILE", raising=False)
    return tmp_path


def read_state(path) -> dict:
    return json.loads(path.read_text(encoding="utf-8"))


def test_first_run_starts_default_pomodoro(tmp_path, capsys) -> None:
    code = main([], clock=lambda: 1000.0)

    out = capsys.readouterr().out
    assert code == EXIT_OK
    assert "Started new 25m pomodoro" in out
    assert read_state(tmp_path / ".pomcli.json") == {"started_at": 1000.0, "duration_seconds": 1500}
    assert "Starting new 1500s pomodoro" in (tmp_path / "pomodoros.log").read_text(encoding="utf-8")


def test_second_run_continues_pomodoro(tmp_path, capsys) -> None:
    main(["-d", "30"], clock=lambda: 1000.0)
    capsys.readouterr()

    code = main(["--duration", "55"], clock=lambda: 1600.0)

    out = capsys.readouterr().out
    assert code == EXIT_OK
    assert "Continuing pomodoro: 20m remaining" in out
    assert read_state(tmp_path / ".pomcli.json") == {"started_at": 1000.0, "duration_seconds": 1800}


def test_restart_flag_starts_over(tmp_path, capsys) -> None:
    main([], clock=lambda: 1000.0)
    capsys.readouterr()

    code = main(["-r", "-d", "10"], clock=lambda: 1100.0)

    assert code == EXIT_OK
    assert "Restarted: new 10m pomodoro" in capsys.readouterr().out
    assert read_state(tmp_path / ".pomcli.json") == {"started_at": 1100.0, "duration_seconds": 600}


def test_finished_pomodoro_rolls_over(capsys) -> None:
    main(["-d", "1"], clock=lambda: 1000.0)
    capsys.readouterr()

    main([], clock=lambda: 1060.0)

    assert "Previous pomodoro finished; started new 25m pomodoro" in capsys.readouterr().out


def test_non_positive_duration_is_rejected(tmp_path, capsys) -> None:
    code = main(["-d", "0"], clock=lambda: 1000.0)

    captured = capsys.readouterr()
    assert code == EXIT_INVALID_INPUT
    assert "Duration must be positive" in captured.err
    assert not (tmp_path / ".pomcli.json").exists()


def test_state_file_option_and_env_override(tmp_path, monkeypatch, capsys) -> None:
    monkeypatch.setenv("POMCLI_STATE_FILE", str(tmp_path / "env" / "state.json"))
    main([], clock=lambda: 1000.0)
    main(["--state-file", str(tmp_path / "flag.json"), "-d", "5"], clock=lambda: 1000.0)
    capsys.readouterr()

    assert read_state(tmp_path / "env" / "state.json")["duration_seconds"] == 1500
    assert read_state(tmp_path / "flag.json")["duration_seconds"] == 300
    assert not (tmp_path / ".pomcli.json").exists()


def test_unwritable_state_warns_but_succeeds(tmp_path, capsys) -> None:
    # a regular file where the parent directory should be makes every save fail
    (tmp_path / "blocker").write_text("", encoding="utf-8")

    code = main(["--state-file", str(tmp_path / "blocker" / "state.json")], clock=lambda: 1000.0)

    out = capsys.readouterr().out
    assert code == EXIT_OK
    assert "Started new 25m pomodoro" in out
    assert "may not resume next time" in out


def test_watch_runs_until_finished(tmp_path, capsys) -> None:
    clock = FakeClock(1000.0)

    code = main(["-d", "1", "--watch"], clock=clock, sleep=clock.sleep)

    assert code == EXIT_OK
    assert clock.now == 1060.0
    assert "Finished at" in capsys.readouterr().out
    assert "Finished pomodoro" in (tmp_path / "pomodoros.log").read_text(encoding="utf-8")


def test_interrupted_watch_keeps_session_for_next_run(tmp_path, capsys) -> None:
    clock = FakeClock(1000.0)

    def interrupt(seconds: float) -> None:
        clock.now += 120
        raise KeyboardInterrupt

    code = main(["--watch"], clock=clock, sleep=interrupt)

    assert code == EXIT_INTERRUPTED
    assert "with 23m remaining" in capsys.readouterr().out

    main([], clock=clock)
    assert "Continuing pomodoro: 23m remaining" in capsys.readouterr().out
    assert read_state(tmp_path / ".pomcli.json") == {"started_at": 1000.0, "duration_seconds": 1500}


def test_largest_u32_duration_is_rejected(tmp_path, capsys) -> None:
    code = main(["-d", "4294967295"], clock=lambda: 1.79e9)

    assert code == EXIT_INVALID_INPUT
    assert "at most 1440 minutes" in capsys.readouterr().err
    assert not (tmp_path / ".pomcli.json").exists()


def test_watch_uses_resumed_symbol_for_continued_pomodoro(monkeypatch, capsys) -> None:
    symbols: list[str] = []

    def fake_watch(console, record, symbol, clock, sleep) -> bool:
        symbols.append(symbol)
        return True

    monkeypatch.setattr("pomcli.main.watch", fake_watch)
    main(["--watch"], clock=lambda: 1000.0)
    main(["--watch"], clock=lambda: 1100.0)
    capsys.readouterr()

    assert symbols == ["🍅", "🍏"]

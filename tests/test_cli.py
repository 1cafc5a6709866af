from __future__ import annotations

import argparse
from datetime import date
from pathlib import Path

import pytest

from conftest import make_game, make_schedule
from mlbv import cli
from mlbv.config import AppConfig, Credentials
from mlbv.errors import AuthFailure, UnexpectedApiShape
from mlbv.schedule import DaySchedule, ScheduleResponse
from mlbv.streams import FeedType, MediaType
from mlbv.teams import find_by_code

TODAY = date(2024, 10, 1)


def _mode(*argv: str) -> cli.Mode:
    ap = cli.build_parser()
    return cli.resolve_mode(ap, ap.parse_args(list(argv)), TODAY)


@pytest.fixture
def quiet(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    # keep pytest's log capture handlers in place and stay out of the real home dir
    monkeypatch.setattr(cli, "configure_logging", lambda *a, **kw: None)
    monkeypatch.setattr(cli.appconfig, "load_config", lambda: AppConfig())
    monkeypatch.setattr(cli, "http_session", lambda: None)
    monkeypatch.setenv("MLBV_HOME", str(tmp_path))
    monkeypatch.setenv("COLUMNS", "160")


def _day(*games: dict) -> DaySchedule:
    return ScheduleResponse.model_validate(make_schedule(("2024-10-01", list(games)))).dates[0]


# --- modes ---------------------------------------------------------------------

def test_no_arguments_shows_today() -> None:
    assert _mode() == cli.ShowDay(day=TODAY)


@pytest.mark.parametrize("argv,expected", [
    (["--yesterday"], date(2024, 9, 30)),
    (["--tomorrow"], date(2024, 10, 2)),
    (["-d", "2024-09-15"], date(2024, 9, 15)),
    (["--date", "09/15/2024"], date(2024, 9, 15)),
])
def test_date_shortcuts(argv: list[str], expected: date) -> None:
    assert _mode(*argv) == cli.ShowDay(day=expected)


def test_team_plays_video_stream_by_default() -> None:
    assert _mode("-t", "tor") == cli.PlayStream(
        team=find_by_code("TOR"), day=TODAY, media_type=MediaType.VIDEO, feed_type=None, game_number=None,
    )


def test_team_stream_with_every_option() -> None:
    mode = _mode("-t", "Yankees", "--audio", "-f", "national", "-g", "2", "--yesterday")

    assert mode == cli.PlayStream(
        team=find_by_code("NYY"), day=date(2024, 9, 30), media_type=MediaType.AUDIO,
        feed_type=FeedType.NATIONAL, game_number=2,
    )


def test_condensed_game_mode() -> None:
    assert _mode("--condensed", "-t", "nyy", "-d", "2024-09-29") == cli.PlayCondensedGame(
        team=find_by_code("NYY"), day=date(2024, 9, 29), game_number=None,
    )


def test_condensed_requires_team() -> None:
    with pytest.raises(SystemExit):
        _mode("--condensed")


def test_recap_with_and_without_team() -> None:
    assert _mode("--recap") == cli.PlayRecap(team=None, day=TODAY, game_number=None)
    assert _mode("--recap", "-t", "141").team == find_by_code("TOR")


@pytest.mark.parametrize("days,start,end", [
    ("3", TODAY, date(2024, 10, 4)),
    ("-3", date(2024, 9, 28), TODAY),
    ("0", TODAY, TODAY),
])
def test_days_range(days: str, start: date, end: date) -> None:
    assert _mode("--days", days) == cli.ShowRange(start=start, end=end)


def test_init_mode() -> None:
    assert _mode("--init") == cli.InitConfig()


@pytest.mark.parametrize("argv", [
    ["--days", "2", "-t", "tor"],
    ["--days", "2", "--recap"],
    ["--days", "-1", "--condensed"],
    ["--yesterday", "--tomorrow"],
    ["-d", "2024-10-01", "--days", "2"],
    ["--condensed", "--recap", "-t", "tor"],
    ["--scores", "--no-scores"],
    ["-t", "xyz"],
    ["-t", "oak"],
    ["-f", "radio", "-t", "tor"],
])
def test_invalid_combinations_exit(argv: list[str]) -> None:
    with pytest.raises(SystemExit):
        _mode(*argv)


# --- argument types ------------------------------------------------------------

@pytest.mark.parametrize("text", ["2024-10-01", "10-01-2024", "10/01/2024"])
def test_game_date_formats(text: str) -> None:
    assert cli.game_date(text) == date(2024, 10, 1)


def test_game_date_before_archive_rejected() -> None:
    with pytest.raises(argparse.ArgumentTypeError, match="2022"):
        cli.game_date("2021-07-04")


def test_game_date_bad_format_rejected() -> None:
    with pytest.raises(argparse.ArgumentTypeError, match="Invalid date format"):
        cli.game_date("Oct 1")


# --- main ----------------------------------------------------------------------

def test_main_prints_day_schedule(quiet, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture) -> None:
    monkeypatch.setattr(cli, "fetch_schedule_by_date", lambda session, day: _day(make_game(775300, state="Final")))

    assert cli.main(["-d", "2024-10-01", "--no-color"]) == 0

    out = capsys.readouterr().out
    assert "2024-10-01 Tuesday" in out
    assert "New York Yankees at Toronto Blue Jays" in out
    assert "2-3" in out


def test_main_no_scores_hides_score(quiet, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture) -> None:
    monkeypatch.setattr(cli, "fetch_schedule_by_date", lambda session, day: _day(make_game(775300, state="Final")))

    cli.main(["-d", "2024-10-01", "--no-color", "--no-scores"])

    assert "2-3" not in capsys.readouterr().out


def test_main_empty_day(quiet, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture) -> None:
    monkeypatch.setattr(cli, "fetch_schedule_by_date", lambda session, day: None)

    assert cli.main(["-d", "2024-12-25"]) == 0
    assert "No games scheduled for 2024-12-25" in capsys.readouterr().out


def test_main_reports_errors_and_exits_nonzero(quiet, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture) -> None:
    def boom(session, day):
        raise UnexpectedApiShape("Expected 1 date but got 2; possible API change")

    monkeypatch.setattr(cli, "fetch_schedule_by_date", boom)

    assert cli.main(["--no-color"]) == 1
    assert "Error: Expected 1 date but got 2" in capsys.readouterr().err


def test_main_stream_prints_url(quiet, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture) -> None:
    seen = {}

    class FakeAuth:
        def __init__(self, cache=None):
            seen["cache"] = cache

        def authorize(self, username, password):
            seen["login"] = (username, password)
            return "authorized"

    def resolve(authorized, team, day, media_type, feed_type=None, game_number=None, language="en"):
        seen["resolve"] = (authorized, team.code, day, media_type, feed_type, language)
        return "https://stream.example/master.m3u8"

    monkeypatch.setattr(cli.appconfig, "load_config", lambda: AppConfig(credentials=Credentials(username="fan", password="pw")))
    monkeypatch.setattr(cli, "AuthSession", FakeAuth)
    monkeypatch.setattr(cli, "resolve_playback_url", resolve)

    assert cli.main(["-t", "tor", "-d", "2024-10-01", "--url"]) == 0

    assert capsys.readouterr().out.strip() == "https://stream.example/master.m3u8"
    assert seen["login"] == ("fan", "pw")
    assert seen["resolve"] == ("authorized", "TOR", TODAY, MediaType.VIDEO, None, "en")
    assert seen["cache"].path.name == "token.json"


def test_main_stream_auth_failure(quiet, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture) -> None:
    class RejectingAuth:
        def __init__(self, cache=None):
            pass

        def authorize(self, username, password):
            raise AuthFailure("Login rejected (http 401)")

    monkeypatch.setattr(cli.appconfig, "load_config", lambda: AppConfig(credentials=Credentials(username="fan", password="pw")))
    monkeypatch.setattr(cli, "AuthSession", RejectingAuth)

    assert cli.main(["-t", "tor", "--no-color"]) == 1
    assert "Login rejected" in capsys.readouterr().err


def test_main_recaps_for_whole_day(quiet, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture) -> None:
    recap = [{"title": "Daily Recap", "items": [{"playbacks": [{"name": "mp4Avc", "url": "https://h/1.mp4"}]}]}]
    day = _day(
        make_game(1, highlights=recap),
        make_game(2, home=(111, "Boston Red Sox"), away=(110, "Baltimore Orioles"), highlights=[]),
    )
    monkeypatch.setattr(cli, "fetch_schedule_by_date", lambda session, d: day)

    assert cli.main(["--recap", "--url", "--no-color"]) == 0

    out = capsys.readouterr().out
    assert "Found 1 recap(s)" in out
    assert "New York Yankees at Toronto Blue Jays" in out
    assert "https://h/1.mp4" in out


def test_main_narrow_terminal_prints_compact_table(
    quiet, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture
) -> None:
    monkeypatch.setenv("COLUMNS", "80")
    monkeypatch.setattr(cli, "fetch_schedule_by_date", lambda session, day: _day(make_game(775300, state="Final")))

    assert cli.main(["-d", "2024-10-01", "--no-color"]) == 0

    out = capsys.readouterr().out
    assert "NYY @ TOR" in out
    assert "Highlights" not in out


def test_init_writes_config_and_drops_cached_token(quiet, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    token = tmp_path / "token.json"
    token.write_text("{}", encoding="utf-8")
    written = []
    monkeypatch.setattr(cli.appconfig, "init_config", lambda: written.append(True) or tmp_path / "config.toml")

    assert cli.main(["--init"]) == 0

    assert written == [True]
    assert not token.exists()

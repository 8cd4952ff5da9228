import pytest

from ftpclient.ui.console import run_command
from ftpclient.ui.levenstein import get_suggestion


@pytest.mark.parametrize("typed, expected", [
    ("pwd", "PWD"),
    ("LSIT", "LIST"),
    ("stro", "STOR"),
    ("xyzzyplugh", ""),
])
def test_get_suggestion(typed, expected):
    assert get_suggestion(typed) == expected


def test_pwd(make_session):
    session, conn = make_session('257 "/pub" is the current directory')
    result = run_command(session, "pwd")
    assert result.ok
    assert result.message == "/pub"
    assert conn.sent == ["PWD"]


def test_verbs_are_case_insensitive(make_session):
    session, conn = make_session("250 OK")
    assert run_command(session, "CWD /pub").ok
    assert conn.sent == ["CWD /pub"]


def test_quoted_arguments(make_session):
    session, conn = make_session("350 Ready", "250 Renamed")
    assert run_command(session, 'rename "old name.txt" new.txt').ok
    assert conn.sent == ["RNFR old name.txt", "RNTO new.txt"]


def test_unknown_verb_suggests(make_session):
    session, conn = make_session()
    result = run_command(session, "pdw")
    assert not result.ok
    assert "Try with PWD" in result.message
    assert conn.sent == []


def test_missing_argument(make_session):
    session, conn = make_session()
    result = run_command(session, "cwd")
    assert not result.ok
    assert result.message == "Usage: CWD path"
    assert conn.sent == []


def test_server_error_is_reported(make_session):
    session, _ = make_session("550 No such file")
    result = run_command(session, "dele ghost.txt")
    assert not result.ok
    assert "550 No such file" in result.message


def test_passive_toggle(make_session):
    session, _ = make_session()
    assert session.passive is False
    assert run_command(session, "passive").message == "Passive mode on"
    assert run_command(session, "passive off").message == "Passive mode off"


def test_empty_line(make_session):
    session, _ = make_session()
    assert not run_command(session, "   ").ok


def test_quit(make_session):
    session, conn = make_session("221 Bye")
    assert run_command(session, "quit").ok
    assert conn.closed
    assert session.conn is None

"""Tests for login session enumeration."""

from types import SimpleNamespace

import psutil
import pytest

from statsmon.errors import SessionsUnavailable
from statsmon.models import UserSession
from statsmon.sessions import collect_user_sessions


def _user(name, terminal, host):
    return SimpleNamespace(name=name, terminal=terminal, host=host, started=0.0, pid=None)


def test_no_sessions_returns_empty_list(monkeypatch):
    """Test an empty login table is not an error."""
    monkeypatch.setattr(psutil, "users", lambda: [])

    assert collect_user_sessions() == []


def test_sessions_keep_enumeration_order(monkeypatch):
    """Test sessions are neither sorted nor de-duplicated."""
    monkeypatch.setattr(
        psutil,
        "users",
        lambda: [
            _user("zoe", "pts/3", "10.0.0.9"),
            _user("alice", "tty1", ""),
            _user("zoe", "pts/3", "10.0.0.9"),
        ],
    )

    sessions = collect_user_sessions()

    assert [s.username for s in sessions] == ["zoe", "alice", "zoe"]
    assert sessions[1] == UserSession("alice", "tty1", "")


def test_missing_fields_become_empty_strings(monkeypatch):
    """Test None terminal/host values are normalized."""
    monkeypatch.setattr(psutil, "users", lambda: [_user("bob", None, None)])

    assert collect_user_sessions() == [UserSession("bob", "", "")]


def test_read_failure_is_fatal(monkeypatch):
    """Test an unreadable session table raises SessionsUnavailable."""

    def broken():
        raise OSError("utmp unavailable")

    monkeypatch.setattr(psutil, "users", broken)

    with pytest.raises(SessionsUnavailable):
        collect_user_sessions()


def test_live_sessions_are_user_sessions():
    """Test the live login table yields UserSession records."""
    for session in collect_user_sessions():
        assert isinstance(session, UserSession)
        assert isinstance(session.username, str)

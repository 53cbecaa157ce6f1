"""Login session enumeration."""

import psutil

from statsmon.errors import SessionsUnavailable
from statsmon.models import UserSession


def collect_user_sessions() -> list[UserSession]:
    """
    Collect the interactive user sessions from the login table.

    psutil only reports USER_PROCESS entries, in utmp order. No sorting or
    de-duplication is applied. An empty list means nobody is logged in.
    """
    try:
        users = psutil.users()
    except (OSError, RuntimeError) as exc:
        raise SessionsUnavailable(f"failed to read login sessions: {exc}") from exc

    return [
        UserSession(
            username=user.name or "",
            terminal_line=user.terminal or "",
            remote_host=user.host or "",
        )
        for user in users
    ]

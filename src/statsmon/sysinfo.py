"""Static system identity report and self resource usage."""

import platform
import resource
import time

import psutil

from statsmon.errors import ResourceUnavailable


def peak_memory_kb() -> int:
    """Get the peak resident set size of this process (kilobytes on Linux)."""
    return resource.getrusage(resource.RUSAGE_SELF).ru_maxrss


def uptime_seconds() -> int:
    """Get the seconds elapsed since the last boot."""
    try:
        boot_time = psutil.boot_time()
    except (OSError, RuntimeError) as exc:
        raise ResourceUnavailable(f"failed to read boot time: {exc}") from exc
    return max(int(time.time() - boot_time), 0)


def format_uptime(seconds: int) -> str:
    """Format uptime as ``D days HH:MM:SS (H:MM:SS)``, the second form in total hours."""
    days = seconds // 86400
    hours = (seconds % 86400) // 3600
    minutes = (seconds % 3600) // 60
    secs = seconds % 60
    return (
        f"{days} days {hours:02d}:{minutes:02d}:{secs:02d} "
        f"({hours + days * 24}:{minutes:02d}:{secs:02d})"
    )


def system_info_lines(
    uname: platform.uname_result | None = None,
    uptime: int | None = None,
) -> list[str]:
    """Build the system identity report printed at the end of a run."""
    if uname is None:
        uname = platform.uname()
    if uptime is None:
        uptime = uptime_seconds()
    return [
        "### System Information ###",
        f" System Name = {uname.system}",
        f" Machine Name = {uname.node}",
        f" Version = {uname.version}",
        f" Release = {uname.release}",
        f" Architecture = {uname.machine}",
        f" System running since last reboot: {format_uptime(uptime)}",
    ]

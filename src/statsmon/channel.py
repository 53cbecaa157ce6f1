"""Text wire format between collector workers and the orchestrator.

Workers hand back nothing but these strings, so a worker never shares
objects with the orchestrator's history.
"""

from statsmon.errors import ChannelDecodeError
from statsmon.models import CpuUsageResult, MemorySample, UserSession

FIELD_SEPARATOR = "\t"


def encode_memory(sample: MemorySample) -> str:
    """Serialize a memory sample as four two-decimal floats."""
    return (
        f"{sample.phys_used_gb:.2f} {sample.phys_total_gb:.2f} "
        f"{sample.virt_used_gb:.2f} {sample.virt_total_gb:.2f}"
    )


def decode_memory(payload: str) -> MemorySample:
    """Parse a payload produced by encode_memory."""
    fields = payload.split()
    if len(fields) != 4:
        raise ChannelDecodeError(f"expected 4 memory fields, got {payload!r}")
    try:
        phys_used, phys_total, virt_used, virt_total = (float(value) for value in fields)
    except ValueError as exc:
        raise ChannelDecodeError(f"invalid memory payload {payload!r}") from exc
    return MemorySample(
        phys_used_gb=phys_used,
        phys_total_gb=phys_total,
        virt_used_gb=virt_used,
        virt_total_gb=virt_total,
    )


def encode_sessions(sessions: list[UserSession]) -> str:
    """Serialize sessions one per line, tab-separated fields."""
    return "".join(
        FIELD_SEPARATOR.join((s.username, s.terminal_line, s.remote_host)) + "\n"
        for s in sessions
    )


def decode_sessions(payload: str) -> list[UserSession]:
    """Parse a payload produced by encode_sessions, preserving order."""
    sessions: list[UserSession] = []
    for line in payload.splitlines():
        fields = line.split(FIELD_SEPARATOR)
        if len(fields) != 3:
            raise ChannelDecodeError(f"expected 3 session fields, got {line!r}")
        username, terminal_line, remote_host = fields
        sessions.append(
            UserSession(
                username=username,
                terminal_line=terminal_line,
                remote_host=remote_host,
            )
        )
    return sessions


def encode_cpu(result: CpuUsageResult) -> str:
    """Serialize a CPU usage result as ``<percent> <anomalous 0|1>``."""
    return f"{result.percentage:.2f} {int(result.anomalous)}"


def decode_cpu(payload: str) -> CpuUsageResult:
    """Parse a payload produced by encode_cpu."""
    fields = payload.split()
    if len(fields) != 2 or fields[1] not in ("0", "1"):
        raise ChannelDecodeError(f"invalid cpu payload {payload!r}")
    try:
        percentage = float(fields[0])
    except ValueError as exc:
        raise ChannelDecodeError(f"invalid cpu payload {payload!r}") from exc
    return CpuUsageResult(percentage=percentage, anomalous=fields[1] == "1")

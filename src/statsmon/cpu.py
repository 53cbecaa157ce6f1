"""CPU counter reading and usage calculation."""

import logging

import psutil

from statsmon.errors import CounterUnavailable
from statsmon.models import CpuCounterSnapshot, CpuUsageResult

logger = logging.getLogger(__name__)

STAT_PATH = "/proc/stat"

# user, nice, system, idle, iowait, irq, softirq
COUNTER_FIELDS = 7
IDLE_FIELD = 3


def parse_cpu_line(line: str) -> CpuCounterSnapshot:
    """
    Parse the aggregate ``cpu`` line of /proc/stat.

    Columns after softirq (steal, guest, ...) are ignored.

    Raises:
        CounterUnavailable: If the line does not carry the expected counters.
    """
    fields = line.split()
    if not fields or fields[0] != "cpu":
        raise CounterUnavailable(f"unexpected cpu counter line: {line.strip()!r}")

    values = fields[1 : 1 + COUNTER_FIELDS]
    if len(values) != COUNTER_FIELDS or not all(value.isdecimal() for value in values):
        raise CounterUnavailable(
            f"expected {COUNTER_FIELDS} CPU time values, got {line.strip()!r}"
        )

    times = [int(value) for value in values]
    return CpuCounterSnapshot(idle_ticks=times[IDLE_FIELD], total_ticks=sum(times))


def read_cpu_counters(path: str = STAT_PATH) -> CpuCounterSnapshot:
    """Read the aggregate CPU counters from the first line of ``path``."""
    try:
        with open(path, encoding="ascii") as stat_file:
            line = stat_file.readline()
    except (OSError, UnicodeDecodeError) as exc:
        raise CounterUnavailable(f"failed to read {path}: {exc}") from exc

    if not line:
        raise CounterUnavailable(f"failed to read from {path}: empty file")
    return parse_cpu_line(line)


def compute_cpu_usage(start: CpuCounterSnapshot, end: CpuCounterSnapshot) -> CpuUsageResult:
    """
    Compute utilization between two counter snapshots.

    A zero total delta yields 0%. Counters that went backwards are logged,
    flagged as anomalous and the percentage is clamped to 0-100.
    """
    total_delta = end.total_ticks - start.total_ticks
    idle_delta = end.idle_ticks - start.idle_ticks

    if total_delta == 0:
        return CpuUsageResult(percentage=0.0)

    usage = 100.0 * (total_delta - idle_delta) / total_delta
    if total_delta < 0 or idle_delta < 0 or not 0.0 <= usage <= 100.0:
        logger.warning(
            "Non-monotonic CPU counters (total delta %d, idle delta %d); clamping usage %.2f",
            total_delta,
            idle_delta,
            usage,
        )
        return CpuUsageResult(percentage=min(max(usage, 0.0), 100.0), anomalous=True)

    return CpuUsageResult(percentage=usage)


def count_cores() -> int:
    """Get the number of online logical processors."""
    return psutil.cpu_count(logical=True) or 1

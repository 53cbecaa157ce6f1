"""Report rendering for statsmon.

The line builders are pure functions over the sample history; ReportRenderer
writes their output to a text stream.
"""

import sys
from typing import TextIO

from statsmon.models import CpuUsageResult, SampleHistory, UserSession

SEPARATOR = "-" * 39
CLEAR_SCREEN = "\033[H\033[2J"
MEMORY_TITLE = "### Memory ### (Phys.Used/Tot -- Virtual Used/Tot)"
SESSIONS_TITLE = "### Sessions/users ###"

MEMORY_BAR_THRESHOLD = 0.01  # GB
MEMORY_BAR_MAX = 100
DIFF_PRECISION = 6
CPU_GRAPHIC_PAD = " " * 9
CPU_GRAPHIC_OFFSET = 3
CPU_GRAPHIC_MAX = 100 + CPU_GRAPHIC_OFFSET


def memory_delta_bar(diff: float, virt_used: float) -> str:
    """
    Build the graphic suffix for a change in virtual memory use.

    ``#`` marks growth, ``@`` shrinkage and ``o`` a change under 0.01 GB.
    Readings carry two decimals, so float noise is rounded away before the
    hundredths are counted: 3.10 -> 3.15 draws five bars, as displayed.
    """
    diff = round(diff, DIFF_PRECISION)
    bars = min(int(round(abs(diff) * 100, DIFF_PRECISION)), MEMORY_BAR_MAX)
    if diff >= MEMORY_BAR_THRESHOLD:
        glyphs = "#" * bars + "*"
    elif diff <= -MEMORY_BAR_THRESHOLD:
        glyphs = "@" * bars + "*"
    else:
        glyphs = "o"
    return f"   |{glyphs} {diff:.2f} ({virt_used:.2f})"


def memory_lines(
    history: SampleHistory,
    current: int,
    sequential: bool,
    graphics: bool,
    baseline: float,
) -> list[str]:
    """
    Build the memory block body for iteration ``current``.

    Cumulative mode lists samples 0..current and pads the remaining slots
    with blank lines. Sequential mode shows only the current sample and a
    blank line for every other slot. Either way the block has one line per
    sample slot.
    """
    lines: list[str] = []
    for index in range(history.sample_count):
        if sequential and index != current:
            lines.append("")
            continue
        if not sequential and index > current:
            lines.append("")
            continue

        sample = history.memory_at(index)
        line = (
            f"{sample.phys_used_gb:.2f} GB / {sample.phys_total_gb:.2f} GB -- "
            f"{sample.virt_used_gb:.2f} GB / {sample.virt_total_gb:.2f} GB"
        )
        if graphics:
            if index == 0:
                diff = 0.0
            elif sequential:
                diff = sample.virt_used_gb - baseline
            else:
                diff = sample.virt_used_gb - history.memory_at(index - 1).virt_used_gb
            line += memory_delta_bar(diff, sample.virt_used_gb)
        lines.append(line)
    return lines


def session_lines(sessions: list[UserSession]) -> list[str]:
    """Build the session block: title followed by one row per session."""
    return [SESSIONS_TITLE] + [
        f"{s.username}\t{s.terminal_line}\t({s.remote_host})" for s in sessions
    ]


def cpu_graphic(usage: float) -> str:
    """Build the bar graphic for one CPU usage percentage."""
    bars = min(max(int(usage + CPU_GRAPHIC_OFFSET), 0), CPU_GRAPHIC_MAX)
    return f"{CPU_GRAPHIC_PAD}{'|' * bars} {usage:.2f} "


def cpu_graphic_lines(history: SampleHistory, current: int, sequential: bool) -> list[str]:
    """Build the CPU graphic table for iterations 0..current."""
    if sequential:
        return [""] * current + [history.cpu_graphic_at(current)]
    return [history.cpu_graphic_at(index) for index in range(current + 1)]


def header_lines(
    index: int,
    samples: int,
    tdelay: int,
    sequential: bool,
    memory_kb: int,
) -> list[str]:
    """Build the per-iteration header."""
    if sequential:
        first = f">>> iteration {index}"
    else:
        first = f"Nbr of samples: {samples} -- every {tdelay} secs"
    return [first, f" Memory usage: {memory_kb} kilobytes"]


class ReportRenderer:
    """Writes report sections to a text stream (stdout by default)."""

    def __init__(self, stream: TextIO | None = None, clear_screen: bool = True) -> None:
        """
        Initialize the ReportRenderer.

        Args:
            stream: Where to write the report. Defaults to the current sys.stdout.
            clear_screen: Emit the clear sequence before cumulative headers.
        """
        self._stream = stream
        self._clear_screen = clear_screen

    @property
    def stream(self) -> TextIO:
        """Get the output stream."""
        return self._stream if self._stream is not None else sys.stdout

    def write_lines(self, lines: list[str]) -> None:
        """Write each line followed by a newline."""
        for line in lines:
            self.stream.write(line + "\n")
        self.stream.flush()

    def header(self, index: int, samples: int, tdelay: int, sequential: bool, memory_kb: int) -> None:
        if not sequential and self._clear_screen:
            self.stream.write(CLEAR_SCREEN)
        self.write_lines(header_lines(index, samples, tdelay, sequential, memory_kb))

    def separator(self) -> None:
        self.write_lines([SEPARATOR])

    def memory(
        self,
        history: SampleHistory,
        current: int,
        sequential: bool,
        graphics: bool,
        baseline: float,
    ) -> None:
        self.write_lines([MEMORY_TITLE] + memory_lines(history, current, sequential, graphics, baseline))

    def sessions(self, sessions: list[UserSession]) -> None:
        self.write_lines(session_lines(sessions))

    def cores(self, count: int) -> None:
        self.write_lines([f"Number of cores: {count}"])

    def cpu_usage(self, result: CpuUsageResult) -> None:
        self.write_lines([f" total CPU use = {result.percentage:.2f}%"])

    def cpu_graphics(self, history: SampleHistory, current: int, sequential: bool) -> None:
        self.write_lines(cpu_graphic_lines(history, current, sequential))

    def system_info(self, lines: list[str]) -> None:
        self.write_lines(lines)

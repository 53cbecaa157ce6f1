"""Data models for statsmon."""

from dataclasses import dataclass, field

USERNAME_MAX = 255
TERMINAL_LINE_MAX = 31
REMOTE_HOST_MAX = 255


@dataclass(slots=True, frozen=True)
class MemorySample:
    """Memory usage for one sample slot, in binary gigabytes."""

    phys_used_gb: float
    phys_total_gb: float
    virt_used_gb: float  # RAM plus swap in use
    virt_total_gb: float


@dataclass(slots=True, frozen=True)
class CpuCounterSnapshot:
    """Aggregate CPU time counters read at one instant."""

    idle_ticks: int
    total_ticks: int


@dataclass(slots=True, frozen=True)
class CpuUsageResult:
    """CPU utilization over one sampling interval."""

    percentage: float  # 0.0 - 100.0
    anomalous: bool = False  # counters went backwards between reads


@dataclass(slots=True, frozen=True)
class UserSession:
    """One interactive login session."""

    username: str
    terminal_line: str
    remote_host: str

    def __post_init__(self) -> None:
        # Frozen dataclass: bypass __setattr__ to apply the length bounds
        object.__setattr__(self, "username", self.username[:USERNAME_MAX])
        object.__setattr__(self, "terminal_line", self.terminal_line[:TERMINAL_LINE_MAX])
        object.__setattr__(self, "remote_host", self.remote_host[:REMOTE_HOST_MAX])


@dataclass(slots=True)
class SampleHistory:
    """
    Per-iteration memory samples and CPU graphics for one run.

    Slots are written once by the orchestrator and read by the renderer.
    """

    sample_count: int
    memory: list[MemorySample | None] = field(default_factory=list)
    cpu_graphics: list[str | None] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.sample_count < 1:
            raise ValueError("sample_count must be at least 1")
        self.memory = [None] * self.sample_count
        self.cpu_graphics = [None] * self.sample_count

    def record_memory(self, index: int, sample: MemorySample) -> None:
        """Store the memory sample for an iteration."""
        if self.memory[index] is not None:
            raise ValueError(f"memory sample {index} already recorded")
        self.memory[index] = sample

    def record_cpu_graphic(self, index: int, graphic: str) -> None:
        """Store the CPU graphic for an iteration."""
        if self.cpu_graphics[index] is not None:
            raise ValueError(f"cpu graphic {index} already recorded")
        self.cpu_graphics[index] = graphic

    def memory_at(self, index: int) -> MemorySample:
        """Get a recorded memory sample, failing on an unwritten slot."""
        sample = self.memory[index]
        if sample is None:
            raise LookupError(f"memory sample {index} has not been recorded")
        return sample

    def cpu_graphic_at(self, index: int) -> str:
        """Get a recorded CPU graphic, failing on an unwritten slot."""
        graphic = self.cpu_graphics[index]
        if graphic is None:
            raise LookupError(f"cpu graphic {index} has not been recorded")
        return graphic

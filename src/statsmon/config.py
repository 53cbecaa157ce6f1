"""Run configuration for statsmon."""

from dataclasses import dataclass

DEFAULT_SAMPLES = 10
DEFAULT_TDELAY = 1
DEFAULT_WORKER_TIMEOUT = 10.0  # seconds


@dataclass(frozen=True)
class MonitorConfig:
    """Settings chosen once per run."""

    samples: int = DEFAULT_SAMPLES
    tdelay: int = DEFAULT_TDELAY  # seconds between samples
    system: bool = False
    user: bool = False
    graphics: bool = False
    sequential: bool = False
    clear_screen: bool = True  # cumulative mode only
    worker_timeout: float = DEFAULT_WORKER_TIMEOUT

    def __post_init__(self) -> None:
        if self.samples < 1:
            raise ValueError(f"samples must be at least 1, got {self.samples}")
        if self.tdelay < 0:
            raise ValueError(f"tdelay must not be negative, got {self.tdelay}")
        if self.worker_timeout <= 0:
            raise ValueError("worker_timeout must be positive")

    @property
    def show_system(self) -> bool:
        """Whether memory and CPU blocks are reported."""
        return self.system or not self.user

    @property
    def show_users(self) -> bool:
        """Whether the session block is reported."""
        return self.user or not self.system

"""Memory statistics collection."""

import psutil

from statsmon.errors import MemInfoUnavailable
from statsmon.models import MemorySample

BYTES_PER_GB = 1024**3


def memory_sample_from_bytes(
    total_ram: int,
    free_ram: int,
    total_swap: int,
    free_swap: int,
) -> MemorySample:
    """Convert raw RAM/swap byte counts into a MemorySample."""
    phys_used = total_ram - free_ram
    swap_used = total_swap - free_swap
    return MemorySample(
        phys_used_gb=phys_used / BYTES_PER_GB,
        phys_total_gb=total_ram / BYTES_PER_GB,
        virt_used_gb=(phys_used + swap_used) / BYTES_PER_GB,
        virt_total_gb=(total_ram + total_swap) / BYTES_PER_GB,
    )


def collect_memory_sample() -> MemorySample:
    """
    Read system memory and swap totals.

    Raises:
        MemInfoUnavailable: If psutil cannot read the memory statistics.
    """
    try:
        mem = psutil.virtual_memory()
        swap = psutil.swap_memory()
    except (OSError, RuntimeError) as exc:
        raise MemInfoUnavailable(f"error reading system statistics: {exc}") from exc

    return memory_sample_from_bytes(
        total_ram=mem.total,
        free_ram=mem.free,
        total_swap=swap.total,
        free_swap=swap.free,
    )

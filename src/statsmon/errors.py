"""Exceptions raised by statsmon collectors and the sample orchestrator.

Every error here is fatal to a run: the CLI logs it and exits non-zero.
"""


class StatsmonError(Exception):
    """Base class for all statsmon errors."""


class ResourceUnavailable(StatsmonError):
    """An OS metrics source could not be read or parsed."""


class CounterUnavailable(ResourceUnavailable):
    """The aggregate CPU counter source is missing or malformed."""


class MemInfoUnavailable(ResourceUnavailable):
    """System memory/swap totals could not be read."""


class SessionsUnavailable(ResourceUnavailable):
    """The login session table could not be enumerated."""


class WorkerSpawnFailure(StatsmonError):
    """A collector worker could not be started."""


class WorkerTimeout(StatsmonError):
    """A collector worker did not finish within the allowed time."""


class AllocationFailure(StatsmonError):
    """A collector ran out of memory."""


class ChannelDecodeError(StatsmonError):
    """A worker payload did not match the channel format."""

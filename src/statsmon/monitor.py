"""Sample orchestration engine for statsmon."""

import asyncio
import logging
import threading
from collections.abc import Awaitable, Callable
from enum import Enum
from queue import Queue

from statsmon.channel import (
    decode_cpu,
    decode_memory,
    decode_sessions,
    encode_cpu,
    encode_memory,
    encode_sessions,
)
from statsmon.config import MonitorConfig
from statsmon.cpu import compute_cpu_usage, count_cores, read_cpu_counters
from statsmon.errors import AllocationFailure, WorkerSpawnFailure, WorkerTimeout
from statsmon.memory import collect_memory_sample
from statsmon.models import CpuCounterSnapshot, CpuUsageResult, MemorySample, SampleHistory, UserSession
from statsmon.render import ReportRenderer, cpu_graphic
from statsmon.sessions import collect_user_sessions
from statsmon.sysinfo import peak_memory_kb, system_info_lines

logger = logging.getLogger(__name__)


class OrchestratorState(Enum):
    """Lifecycle states of a sampling run."""

    IDLE = "idle"
    COLLECTING = "collecting"
    RENDERING = "rendering"
    DONE = "done"
    CANCELLED = "cancelled"


def _finish(finished: asyncio.Future, error: BaseException | None) -> None:
    if finished.done():
        return  # already timed out
    if error is None:
        finished.set_result(None)
    else:
        finished.set_exception(error)


class SampleOrchestrator:
    """
    Runs the sampling loop and owns the sample history.

    Every collector runs in its own short-lived daemon thread and hands back
    only an encoded string over a one-slot Queue. The orchestrator waits for
    each worker in turn (memory, then users, then CPU) with a bounded wait,
    decodes the payload and merges it into the history before rendering.
    """

    def __init__(
        self,
        config: MonitorConfig,
        renderer: ReportRenderer | None = None,
        *,
        read_counters: Callable[[], CpuCounterSnapshot] = read_cpu_counters,
        collect_memory: Callable[[], MemorySample] = collect_memory_sample,
        collect_sessions: Callable[[], list[UserSession]] = collect_user_sessions,
        cores: Callable[[], int] = count_cores,
        memory_kb: Callable[[], int] = peak_memory_kb,
        system_info: Callable[[], list[str]] = system_info_lines,
        confirm_quit: Callable[[], bool] | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """
        Initialize the SampleOrchestrator.

        Args:
            config: Run configuration.
            renderer: Report writer. Defaults to stdout.
            read_counters: CPU counter reader.
            collect_memory: Memory collector, run in a worker.
            collect_sessions: Session collector, run in a worker.
            cores: Online core count provider.
            memory_kb: Peak memory of this process, shown in the header.
            system_info: Builder of the end-of-run identity report.
            confirm_quit: Asked after an interrupt; True stops the run.
                Without it an interrupt stops the run unconditionally.
            sleep: Coroutine used for the sampling interval.
        """
        self._config = config
        self._renderer = renderer or ReportRenderer(clear_screen=config.clear_screen)
        self._read_counters = read_counters
        self._collect_memory = collect_memory
        self._collect_sessions = collect_sessions
        self._cores = cores
        self._memory_kb = memory_kb
        self._system_info = system_info
        self._confirm_quit = confirm_quit
        self._sleep = sleep

        self._history = SampleHistory(config.samples)
        self._prev_virt = 0.0
        self._state = OrchestratorState.IDLE
        self._index = 0
        self._interrupt = threading.Event()

    @property
    def state(self) -> OrchestratorState:
        """Get the current lifecycle state."""
        return self._state

    @property
    def history(self) -> SampleHistory:
        """Get the sample history (read-only use)."""
        return self._history

    @property
    def prev_virt(self) -> float:
        """Get the virtual memory baseline of the last rendered sample."""
        return self._prev_virt

    def request_quit(self) -> None:
        """Ask the run to stop at the next iteration boundary. Safe from signal handlers."""
        self._interrupt.set()

    async def run(self) -> OrchestratorState:
        """
        Run every iteration, then print the system identity report.

        Returns:
            DONE after all samples, or CANCELLED if the user quit.
        """
        for index in range(self._config.samples):
            if self._interrupt.is_set() and await self._should_quit():
                self._state = OrchestratorState.CANCELLED
                logger.info("Run cancelled before iteration %d", index)
                return self._state
            await self.run_iteration(index)

        self._state = OrchestratorState.DONE
        self._renderer.separator()
        self._renderer.system_info(self._system_info())
        self._renderer.separator()
        return self._state

    async def _should_quit(self) -> bool:
        if self._confirm_quit is None:
            self._interrupt.clear()
            return True
        confirmed = await asyncio.to_thread(self._confirm_quit)
        # Interrupts arriving while the prompt is open are answered by it
        self._interrupt.clear()
        return confirmed

    async def run_iteration(self, index: int) -> None:
        """Collect and render one sample."""
        config = self._config
        renderer = self._renderer

        self._index = index
        self._set_state(OrchestratorState.COLLECTING)
        start = self._read_counters()
        await self._sleep(config.tdelay)

        self._set_state(OrchestratorState.RENDERING)
        renderer.header(index, config.samples, config.tdelay, config.sequential, self._memory_kb())
        renderer.separator()

        if not config.show_system:
            await self._report_sessions()
            renderer.separator()
            return

        sample = await self._gather_memory()
        self._history.record_memory(index, sample)
        renderer.memory(self._history, index, config.sequential, config.graphics, self._prev_virt)
        self._prev_virt = sample.virt_used_gb

        if config.show_users:
            renderer.separator()
            await self._report_sessions()
            renderer.separator()

        renderer.cores(self._cores())
        usage = await self._gather_cpu(start)
        renderer.cpu_usage(usage)
        if config.graphics:
            self._history.record_cpu_graphic(index, cpu_graphic(usage.percentage))
            renderer.cpu_graphics(self._history, index, config.sequential)

    def _set_state(self, state: OrchestratorState) -> None:
        self._state = state
        logger.debug("Iteration %d: %s", self._index, state.value)

    async def _gather_memory(self) -> MemorySample:
        payload = await self._run_worker("memory", lambda: encode_memory(self._collect_memory()))
        return decode_memory(payload)

    async def _report_sessions(self) -> None:
        payload = await self._run_worker("users", lambda: encode_sessions(self._collect_sessions()))
        self._renderer.sessions(decode_sessions(payload))

    async def _gather_cpu(self, start: CpuCounterSnapshot) -> CpuUsageResult:
        payload = await self._run_worker(
            "cpu",
            lambda: encode_cpu(compute_cpu_usage(start, self._read_counters())),
        )
        return decode_cpu(payload)

    async def _run_worker(self, name: str, task: Callable[[], str]) -> str:
        """
        Run ``task`` in an isolated thread and return the payload it produced.

        The state is COLLECTING while the worker runs and RENDERING once its
        payload is ready to be merged and printed.

        Raises:
            WorkerSpawnFailure: If the thread cannot be started.
            WorkerTimeout: If the worker exceeds the configured timeout.
            AllocationFailure: If the worker ran out of memory.
        """
        loop = asyncio.get_running_loop()
        finished: asyncio.Future[None] = loop.create_future()
        channel: Queue[str] = Queue(maxsize=1)

        def worker() -> None:
            error: BaseException | None = None
            try:
                channel.put_nowait(task())
            except MemoryError as exc:
                error = AllocationFailure(f"{name} worker ran out of memory")
                error.__cause__ = exc
            except Exception as exc:
                error = exc
            try:
                loop.call_soon_threadsafe(_finish, finished, error)
            except RuntimeError:
                pass  # loop closed after a timeout

        self._set_state(OrchestratorState.COLLECTING)
        thread = threading.Thread(target=worker, daemon=True, name=f"statsmon-{name}")
        try:
            thread.start()
        except RuntimeError as exc:
            raise WorkerSpawnFailure(f"cannot start {name} worker: {exc}") from exc

        timeout = self._config.worker_timeout
        try:
            await asyncio.wait_for(finished, timeout=timeout)
        except asyncio.TimeoutError as exc:
            raise WorkerTimeout(f"{name} worker did not finish within {timeout:g}s") from exc

        thread.join()
        logger.debug("%s worker finished", name)
        self._set_state(OrchestratorState.RENDERING)
        return channel.get_nowait()

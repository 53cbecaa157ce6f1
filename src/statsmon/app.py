"""statsmon - command-line entry point."""

import argparse
import asyncio
import logging
import signal
import sys

from statsmon.config import DEFAULT_SAMPLES, DEFAULT_TDELAY, MonitorConfig
from statsmon.errors import StatsmonError
from statsmon.monitor import OrchestratorState, SampleOrchestrator

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line parser."""
    parser = argparse.ArgumentParser(
        prog="statsmon",
        description="Sample memory, CPU and user sessions at a fixed interval.",
    )
    parser.add_argument("-s", "--system", action="store_true", help="report memory and CPU only")
    parser.add_argument("-u", "--user", action="store_true", help="report user sessions only")
    parser.add_argument("-g", "--graphics", action="store_true", help="draw memory and CPU graphics")
    parser.add_argument("-q", "--sequential", action="store_true", help="print one snapshot per iteration")
    parser.add_argument("-n", "--samples", type=int, help=f"number of samples (default {DEFAULT_SAMPLES})")
    parser.add_argument("-t", "--tdelay", type=int, help=f"seconds between samples (default {DEFAULT_TDELAY})")
    parser.add_argument("-v", "--verbose", action="store_true", help="log debug information to stderr")
    parser.add_argument(
        "positional",
        nargs="*",
        type=int,
        metavar="VALUE",
        help="samples and tdelay, used when the matching flag is absent",
    )
    return parser


def config_from_args(args: argparse.Namespace) -> MonitorConfig:
    """
    Build a MonitorConfig from parsed arguments.

    Positional values fill samples then tdelay, each only when its flag was
    not given. Values beyond the second are ignored.
    """
    samples = args.samples
    tdelay = args.tdelay
    positional = list(args.positional)[:2]
    if samples is None and len(positional) >= 1:
        samples = positional[0]
    if tdelay is None and len(positional) >= 2:
        tdelay = positional[1]

    return MonitorConfig(
        samples=DEFAULT_SAMPLES if samples is None else samples,
        tdelay=DEFAULT_TDELAY if tdelay is None else tdelay,
        system=args.system,
        user=args.user,
        graphics=args.graphics,
        sequential=args.sequential,
    )


def configure_logging(verbose: bool) -> None:
    """Send log records to stderr, debug level when verbose."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )


def prompt_quit() -> bool:
    """Ask the user whether to stop the run."""
    try:
        response = input("\nDo you want to quit? [y/N]: ")
    except EOFError:
        response = ""

    if response[:1] in ("y", "Y"):
        print("Exiting program...")
        return True
    print("Continuing execution...")
    return False


async def run_monitor(config: MonitorConfig) -> OrchestratorState:
    """Run the orchestrator with Ctrl-C routed to the quit prompt."""
    orchestrator = SampleOrchestrator(config, confirm_quit=prompt_quit)
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, orchestrator.request_quit)
    except (NotImplementedError, RuntimeError):
        logger.debug("SIGINT handler unavailable; Ctrl-C will abort the run")

    try:
        return await orchestrator.run()
    finally:
        try:
            loop.remove_signal_handler(signal.SIGINT)
        except (NotImplementedError, RuntimeError):
            pass


def main(argv: list[str] | None = None) -> int:
    """Entry point for statsmon."""
    parser = build_parser()
    args = parser.parse_intermixed_args(argv)
    try:
        config = config_from_args(args)
    except ValueError as exc:
        parser.error(str(exc))

    configure_logging(args.verbose)
    if hasattr(signal, "SIGTSTP"):
        signal.signal(signal.SIGTSTP, signal.SIG_IGN)

    try:
        state = asyncio.run(run_monitor(config))
    except StatsmonError as exc:
        logger.error("%s", exc)
        return 1
    except KeyboardInterrupt:
        return 130

    logger.debug("Run finished: %s", state.value)
    return 0


if __name__ == "__main__":
    sys.exit(main())

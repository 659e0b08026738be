"""Actions Monitor Worker entry point.

This module wires configuration, the GitHub client, state persistence and the
monitor loop together, installs signal handlers for graceful shutdown and
provides the ``gha-monitor`` command.
"""

import asyncio
import contextlib
import logging
import signal
import sys
from collections.abc import Sequence
from typing import Any

from ..config import ConfigurationError, ConfigurationLoader, MonitorConfig
from ..github.auth import TokenAuth
from ..github.client import GitHubClient, GitHubClientConfig
from ..state import RepositoryStateStore
from .monitor import ActionsMonitor, CancellationToken, EventSink

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class ActionsMonitorWorker:
    """Runs an ``ActionsMonitor`` for the configured repository.

    Manages:
    - GitHub client and state store construction
    - Signal handling (SIGINT, SIGTERM) for graceful shutdown
    - Resource cleanup
    """

    def __init__(self, config: MonitorConfig, sink: EventSink | None = None):
        """Initialize worker.

        Args:
            config: Validated monitor configuration
            sink: Destination for event lines, stdout by default
        """
        self.config = config
        self.sink = sink
        self.cancellation = CancellationToken()

        self.github_client: GitHubClient | None = None
        self.store: RepositoryStateStore | None = None
        self.monitor: ActionsMonitor | None = None
        self._signals_installed: list[int] = []

    async def initialize(self) -> None:
        """Create the client, load repository state and build the monitor."""
        repository = self.config.repository
        logger.info(
            f"Initializing monitor for {repository} "
            f"(interval={self.config.interval_seconds}s, "
            f"token=*** length={len(self.config.token)})"
        )

        self.github_client = GitHubClient(
            auth=TokenAuth(self.config.token),
            config=GitHubClientConfig(
                base_url=self.config.api_base_url,
                timeout=self.config.request_timeout,
            ),
        )

        self.store = RepositoryStateStore(self.config.state_dir)
        state = self.store.load(repository.full_name)
        logger.info(
            f"State file {self.store.state_file(repository.full_name)} "
            f"(initialized={state.initialized})"
        )

        self.monitor = ActionsMonitor(
            client=self.github_client,
            store=self.store,
            state=state,
            repository=repository,
            interval_seconds=self.config.interval_seconds,
            runs_per_page=self.config.runs_per_page,
            jobs_per_page=self.config.jobs_per_page,
            max_run_pages=self.config.max_run_pages,
            sink=self.sink,
            cancellation=self.cancellation,
        )

    async def run(self) -> None:
        """Run the monitor until a stop is requested."""
        if not self.monitor:
            raise RuntimeError("Worker not initialized. Call initialize() first.")

        self._setup_signal_handlers()
        try:
            await self.monitor.run()
        except asyncio.CancelledError:
            logger.info("Worker cancelled")
            self.monitor.persist()
            raise

    def shutdown(self) -> None:
        """Initiate graceful shutdown."""
        if not self.cancellation.cancelled:
            logger.info("Shutting down Actions Monitor Worker...")
        self.cancellation.cancel()

    def _setup_signal_handlers(self) -> None:
        """Set up signal handlers for graceful shutdown."""
        loop = asyncio.get_running_loop()

        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self._on_signal, sig)
                self._signals_installed.append(sig)
            except (NotImplementedError, RuntimeError):
                # No loop signal support (e.g. Windows); fall back to the
                # process-wide handler, which still sets the token.
                signal.signal(sig, self._signal_handler)

    def _on_signal(self, sig: int) -> None:
        logger.info(f"Received signal {sig}, initiating shutdown...")
        self.shutdown()

    def _signal_handler(self, sig: int, frame: Any) -> None:
        self._on_signal(sig)

    async def cleanup(self) -> None:
        """Clean up resources."""
        if self._signals_installed:
            loop = asyncio.get_running_loop()
            for sig in self._signals_installed:
                with contextlib.suppress(NotImplementedError, RuntimeError):
                    loop.remove_signal_handler(sig)
            self._signals_installed.clear()

        if self.github_client:
            await self.github_client.close()

        logger.debug("Cleanup completed")


def configure_logging(level: str) -> None:
    """Send diagnostics to stderr; stdout carries only event lines."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        stream=sys.stderr,
    )


async def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point for the Actions monitor.

    Returns:
        Process exit status
    """
    loader = ConfigurationLoader()
    try:
        config = loader.load_from_args(argv)
    except ConfigurationError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        loader.parser.print_usage(sys.stderr)
        return 2

    configure_logging(config.log_level.value)

    worker = ActionsMonitorWorker(config)
    try:
        await worker.initialize()
        await worker.run()
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    except Exception as e:
        logger.error(f"Worker failed: {e}", exc_info=True)
        return 1
    finally:
        await worker.cleanup()

    return 0


def cli() -> None:
    """Console script entry point."""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    cli()

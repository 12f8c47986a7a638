# ==============================================================================
# Base Runner Abstract Class
# ==============================================================================
"""
Process lifecycle for long-running session tracker hosts.

The Kafka consumer and the watchdog worker both run a poll loop until SIGINT
or SIGTERM arrives. This class owns that lifecycle:
- logging setup at the configured level
- signal handlers that flip a shutdown flag instead of killing the loop
- a cleanup hook that always runs, so sinks get flushed

Subclasses implement _run() and check shutdown_requested between iterations.
"""

import logging
import signal
import time
from abc import ABC, abstractmethod
from typing import final

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Third-party loggers that are too chatty at INFO
QUIET_LOGGERS = ("urllib3", "kafka", "redis")


class BaseRunner(ABC):
    """Poll-loop process with cooperative shutdown."""

    def __init__(self, log_level: str = "INFO"):
        self._shutdown_requested = False
        self._log_level = log_level
        self._started_at: float | None = None

    @final
    def run(self) -> None:
        """Run the loop until shutdown is requested, then clean up."""
        self._setup_signal_handlers()
        self._setup_logging()
        self._started_at = time.monotonic()

        try:
            self._run()
        except KeyboardInterrupt:
            logger.info("%s interrupted by keyboard", type(self).__name__)
        finally:
            self._cleanup()
            logger.info("%s ran for %.1fs", type(self).__name__, self.uptime_seconds)

    @abstractmethod
    def _run(self) -> None:
        """Poll loop. Must return once shutdown_requested is True."""
        ...

    @property
    def uptime_seconds(self) -> float:
        """Seconds since run() started, 0 if it has not."""
        if self._started_at is None:
            return 0.0
        return time.monotonic() - self._started_at

    def _setup_signal_handlers(self) -> None:
        signal.signal(signal.SIGTERM, self._handle_signal)
        signal.signal(signal.SIGINT, self._handle_signal)

    def _handle_signal(self, signum, frame) -> None:
        logger.info("Received signal %d, requesting shutdown...", signum)
        self.request_shutdown()

    def _setup_logging(self) -> None:
        logging.basicConfig(
            level=getattr(logging, self._log_level.upper(), logging.INFO),
            format=LOG_FORMAT,
        )
        for name in QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    def _on_shutdown_requested(self) -> None:
        """Hook called once shutdown is requested. Optional override."""
        pass

    def _cleanup(self) -> None:
        """Release resources (consumer, sink). Optional override."""
        pass

    def request_shutdown(self) -> None:
        """Ask the run loop to exit after the current iteration."""
        self._shutdown_requested = True
        self._on_shutdown_requested()

    @property
    def shutdown_requested(self) -> bool:
        return self._shutdown_requested

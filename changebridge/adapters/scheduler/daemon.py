"""Daemon scheduler adapter.

Implements a long-running asyncio loop that runs adapter health
checks at a configurable interval.
"""

import asyncio
import logging
import signal
from typing import Any

from changebridge.core.ports import HealthcheckPort

logger = logging.getLogger(__name__)


class HealthcheckScheduler:
    """Asyncio-based daemon scheduler for periodic health checks."""

    def __init__(
        self,
        healthcheck_port: HealthcheckPort | None = None,
        interval_seconds: int = 60,
        offline_alert_threshold: int = 5,
    ):
        """Initialize daemon scheduler.

        Args:
            healthcheck_port: HealthcheckPort to probe each cycle (can be set later).
            interval_seconds: Interval between health checks in seconds.
            offline_alert_threshold: Consecutive OFFLINE results before a
                critical log entry is written.
        """
        self.healthcheck_port = healthcheck_port
        self.interval_seconds = interval_seconds
        self.offline_alert_threshold = offline_alert_threshold
        self.running = False
        self._task: asyncio.Task[None] | None = None
        self._offline_count = 0  # consecutive OFFLINE results
        self.cycles_run = 0

    @property
    def offline_count(self) -> int:
        return self._offline_count

    async def start(self) -> None:
        """Start the daemon scheduler loop.

        Raises:
            ValueError: If healthcheck_port is not set.
        """
        if self.healthcheck_port is None:
            raise ValueError("healthcheck_port must be set before starting the scheduler")

        if self.running:
            logger.warning("Daemon scheduler already running")
            return

        self.running = True
        logger.info(
            f"Starting health check scheduler with {self.interval_seconds}s interval"
        )

        self._setup_signal_handlers()

        self._task = asyncio.current_task()
        try:
            await self._run_loop()
        except asyncio.CancelledError:
            logger.info("Daemon scheduler cancelled")
        except Exception as e:
            logger.error(f"Daemon scheduler error: {e}", exc_info=True)
        finally:
            self.running = False
            self._task = None
            logger.info("Daemon scheduler stopped")

    async def stop(self) -> None:
        """Stop the daemon scheduler loop."""
        if not self.running:
            return

        logger.info("Stopping daemon scheduler...")
        self.running = False

        if self._task and self._task is not asyncio.current_task():
            self._task.cancel()

    def _setup_signal_handlers(self) -> None:
        """Set up signal handlers for graceful shutdown."""
        try:
            loop = asyncio.get_running_loop()

            def _handle_signal(sig: int) -> None:
                logger.info(f"Received signal {sig}, initiating graceful shutdown...")
                asyncio.create_task(self.stop())

            loop.add_signal_handler(
                signal.SIGTERM, _handle_signal, signal.SIGTERM
            )
            loop.add_signal_handler(signal.SIGINT, _handle_signal, signal.SIGINT)
        except NotImplementedError:
            # Signal handlers not available on Windows
            logger.debug("Signal handlers not available on this platform")
        except Exception as e:
            logger.warning(f"Failed to set up signal handlers: {e}")

    async def _run_loop(self) -> None:
        """Main daemon loop."""
        while self.running:
            try:
                await self.run_single_check()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(
                    f"Error in health check cycle #{self.cycles_run}: {e}",
                    exc_info=True,
                )

            if self.running:
                await asyncio.sleep(self.interval_seconds)

    async def run_single_check(self) -> None:
        """Run one health check and track consecutive OFFLINE results."""
        port = self.healthcheck_port
        if port is None:
            raise ValueError("healthcheck_port must be set to run a health check")

        self.cycles_run += 1
        cycle_number = self.cycles_run
        logger.debug(f"Starting health check #{cycle_number}")

        loop = asyncio.get_running_loop()
        start_time = loop.time()
        await port.healthcheck(self._on_result)
        elapsed = loop.time() - start_time
        logger.debug(f"Health check #{cycle_number} finished in {elapsed:.2f}s")

    def _on_result(self, result: Any, error: BaseException | None) -> None:
        if error is None:
            if self._offline_count:
                logger.info(
                    f"Instance back online after {self._offline_count} failed check(s)"
                )
            self._offline_count = 0
            return

        self._offline_count += 1
        if self._offline_count >= self.offline_alert_threshold:
            logger.critical(
                f"Health check has failed {self._offline_count} consecutive times. "
                f"The ticketing system may be down. Manual intervention may be required."
            )

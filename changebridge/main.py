"""Composition root for the changebridge adapter.

This module is the ONLY location that imports both core domain logic
and concrete adapter implementations. All wiring of dependencies
happens here, creating a clear entry point for the application.

Module Structure:
- Configuration loading via config module
- Connector and adapter instantiation
- Event listener registration
- Run mode selection (daemon or single check)
"""

import asyncio
import logging
import sys
from collections.abc import Mapping
from typing import Any

from changebridge.adapters.connector.servicenow import ServiceNowConnector
from changebridge.adapters.scheduler.daemon import HealthcheckScheduler
from changebridge.config import Settings, load_settings
from changebridge.core.adapter import ChangeRequestAdapter
from changebridge.core.models import (
    AdapterProperties,
    HealthStatus,
    MissingBodyPolicy,
)


def configure_logging(log_level: str, log_format: str) -> None:
    """Configure application logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_format: Log format (json, text).
    """
    level = getattr(logging, log_level, logging.INFO)

    if log_format == "json":
        format_str = '{"time": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": "%(message)s"}'
    else:
        format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=level,
        format=format_str,
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )


def build_adapter(
    adapter_id: str,
    properties: AdapterProperties | Mapping[str, Any],
    timeout_seconds: float = 30.0,
    missing_body_policy: MissingBodyPolicy = MissingBodyPolicy.DROP,
    log: logging.Logger | None = None,
) -> ChangeRequestAdapter:
    """Create an adapter backed by a ServiceNow connector.

    This is what a host calls with its ``(id, properties)`` pair.

    Args:
        adapter_id: Host-supplied instance identifier.
        properties: Adapter properties or the host's raw mapping.
        timeout_seconds: Per-request timeout for the connector.
        missing_body_policy: Handling for body-less responses.
        log: Logger injected into the adapter.

    Returns:
        ChangeRequestAdapter owning a fresh ServiceNowConnector.

    Raises:
        ConfigError: If properties fail validation.
    """
    return ChangeRequestAdapter(
        adapter_id=adapter_id,
        properties=properties,
        connector_factory=lambda props: ServiceNowConnector(
            props, timeout_seconds=timeout_seconds
        ),
        missing_body_policy=missing_body_policy,
        log=log,
    )


def build_adapter_from_settings(settings: Settings) -> ChangeRequestAdapter:
    """Create an adapter from loaded settings."""
    return build_adapter(
        adapter_id=settings.adapter_id,
        properties=settings.adapter_properties(),
        timeout_seconds=settings.request_timeout_seconds,
        missing_body_policy=settings.body_policy(),
        log=logging.getLogger(f"changebridge.adapter.{settings.adapter_id}"),
    )


def _register_status_listeners(adapter: ChangeRequestAdapter) -> None:
    """Log every status event the adapter publishes."""
    logger = logging.getLogger(__name__)

    for status in HealthStatus:

        def _listener(payload: dict[str, Any], status: HealthStatus = status) -> None:
            logger.info(f"Adapter {payload['id']} reported {status.value}")

        adapter.on(status.value, _listener)


async def bootstrap(settings: Settings | None = None) -> None:
    """Load configuration, wire the adapter, and start the selected run mode.

    Steps:
    1. Load configuration from environment
    2. Configure logging
    3. Instantiate the adapter and its connector
    4. Select and start run mode

    Raises:
        ValidationError: On invalid configuration.
        asyncio.CancelledError: On graceful shutdown signal
    """
    # Step 1: Load configuration
    if settings is None:
        settings = load_settings()

    # Step 2: Configure logging
    configure_logging(settings.log_level, settings.log_format)
    logger = logging.getLogger(__name__)
    logger.info("Loading changebridge adapter...")

    # Step 3: Instantiate adapter
    adapter = build_adapter_from_settings(settings)
    _register_status_listeners(adapter)
    logger.info(
        f"Adapter {adapter.id} targeting {settings.servicenow_url} "
        f"table {settings.servicenow_table}"
    )

    # Step 4: Select run mode and start
    logger.info(f"Starting in {settings.run_mode} mode...")

    try:
        if settings.run_mode == "daemon":
            scheduler = HealthcheckScheduler(
                healthcheck_port=adapter,
                interval_seconds=settings.healthcheck_interval_seconds,
                offline_alert_threshold=settings.offline_alert_threshold,
            )
            await scheduler.start()

        elif settings.run_mode == "once":
            await adapter.connect()

        else:
            logger.error(f"Unknown run mode: {settings.run_mode}")
            sys.exit(1)

    finally:
        await adapter.close()


def main() -> None:
    """Application entry point.

    Exit codes:
        0: Successful shutdown
        1: Fatal bootstrap or runtime error
        130: Interrupted by user (SIGINT/KeyboardInterrupt)
    """
    logger = logging.getLogger(__name__)
    try:
        asyncio.run(bootstrap())
    except KeyboardInterrupt:
        logger.warning("Shutdown requested by user (SIGINT)")
        sys.exit(130)
    except asyncio.CancelledError:
        logger.info("Graceful shutdown completed")
        sys.exit(0)
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()

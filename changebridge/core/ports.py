"""Port interfaces for the changebridge adapter.

These abstract base classes define the boundaries between core
domain logic and external adapters. Implementations live in the
adapters/ package.

Port Interface Categories:

1. **Driven Ports** (core calls out to adapters)
   - ConnectorPort: Raw get/post calls against the ticketing system

2. **Driving Ports** (the host calls into core)
   - HealthcheckPort: Entry point for on-demand and scheduled health checks
"""

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, TypeAlias

from .models import ResponseEnvelope

# Host callbacks follow a data-first convention: (result, error).
# Either a plain function or a coroutine function is accepted.
RecordCallback: TypeAlias = Callable[[Any, BaseException | None], Awaitable[None] | None]


# ============================================================================
# DRIVEN PORTS (Core calls out to adapters)
# ============================================================================


class ConnectorPort(ABC):
    """Port for issuing raw requests against the external ticketing system.

    Adapters implementing this port perform exactly one network call per
    operation and hand back the undecoded response. They must not
    normalize records; that is the core's job.

    Implementations must handle:
    - URL and authentication construction
    - Timeouts (the core has no timeout logic of its own)
    - Classifying bad responses as errors
    """

    @abstractmethod
    async def get(self) -> ResponseEnvelope:
        """Fetch records from the target resource.

        Returns:
            ResponseEnvelope whose body, when present, holds JSON shaped
            ``{"result": [ {...}, ... ]}``.

        Raises:
            Exception: If the request failed. The exception is handed to
                the host unchanged.
        """

    @abstractmethod
    async def post(self, fields: Mapping[str, Any] | None = None) -> ResponseEnvelope:
        """Create a record on the target resource.

        Args:
            fields: Column values for the new record (optional).
                If None, an empty record is created.

        Returns:
            ResponseEnvelope whose body, when present, holds JSON shaped
            ``{"result": {...}}``.

        Raises:
            Exception: If the request failed.
        """

    @abstractmethod
    async def close(self) -> None:
        """Release any transport resources."""


# ============================================================================
# DRIVING PORTS (Host calls into core)
# ============================================================================


class HealthcheckPort(ABC):
    """Port for triggering health checks.

    Called by the daemon scheduler or directly by the host.
    """

    @abstractmethod
    async def healthcheck(self, callback: RecordCallback | None = None) -> None:
        """Probe the external system and announce ONLINE or OFFLINE.

        Args:
            callback: Optional host callback receiving (records, None) on
                success or (None, error) on failure.

        Never raises.
        """

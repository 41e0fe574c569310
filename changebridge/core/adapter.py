"""Change request adapter lifecycle.

This module implements the adapter the orchestration host talks to:
- Health checks that re-derive reachability on every call
- ONLINE/OFFLINE event emission
- get/post wrappers that normalize connector responses

All failures reach the host through its callback (and, for health
checks, through an OFFLINE event). No operation raises past its own
boundary.
"""

import inspect
import logging
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any, TypeVar

from .errors import EmptyResponseError, MalformedPayloadError
from .events import EventEmitter, Listener
from .models import (
    AdapterProperties,
    ChangeTicket,
    HealthReport,
    HealthStatus,
    MissingBodyPolicy,
    ResponseEnvelope,
)
from .normalize import RecordNormalizer
from .ports import ConnectorPort, HealthcheckPort, RecordCallback

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ChangeRequestAdapter(HealthcheckPort):
    """Adapter between an orchestration host and the change request table.

    Each instance owns exactly one connector, built from its properties
    at construction time and never replaced.
    """

    def __init__(
        self,
        adapter_id: str,
        properties: AdapterProperties | Mapping[str, Any],
        connector_factory: Callable[[AdapterProperties], ConnectorPort],
        missing_body_policy: MissingBodyPolicy = MissingBodyPolicy.DROP,
        emitter: EventEmitter | None = None,
        log: logging.Logger | None = None,
        normalizer: RecordNormalizer | None = None,
    ):
        """Initialize the adapter.

        Args:
            adapter_id: Host-supplied identifier, used to tag events and logs.
            properties: Adapter properties, or the host's raw mapping of them.
            connector_factory: Builds the connector from the properties.
                Called exactly once.
            missing_body_policy: Whether a response without a body is
                dropped silently or reported as EmptyResponseError.
            emitter: Event registry to publish on (a new one by default).
            log: Logger to write to (the module logger by default).
            normalizer: Record normalizer (a new one by default).

        Raises:
            ConfigError: If properties is a mapping that fails validation.
        """
        if not isinstance(properties, AdapterProperties):
            properties = AdapterProperties.from_mapping(properties)

        self.id = adapter_id
        self.properties = properties
        self.missing_body_policy = missing_body_policy
        self.emitter = emitter or EventEmitter()
        self.logger = log or logger
        self.normalizer = normalizer or RecordNormalizer()
        self._connector = connector_factory(properties)

    @property
    def connector(self) -> ConnectorPort:
        return self._connector

    def _extra(self) -> dict[str, Any]:
        return {"adapter_id": self.id}

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def connect(self) -> None:
        """Run a single health check. No retry."""
        await self.healthcheck()

    async def close(self) -> None:
        """Close the owned connector."""
        await self._connector.close()

    async def probe(self) -> HealthReport | None:
        """Determine reachability by fetching records.

        Nothing is cached; each call issues a fresh request.

        Returns:
            HealthReport, or None if the fetch produced no outcome
            (a body-less response under the DROP policy).
        """
        outcome: list[HealthReport] = []

        def _record(result: list[ChangeTicket] | None, error: BaseException | None) -> None:
            checked_at = datetime.now(UTC)
            if error:
                outcome.append(
                    HealthReport(HealthStatus.OFFLINE, checked_at, error=error)
                )
            else:
                outcome.append(
                    HealthReport(HealthStatus.ONLINE, checked_at, result=result)
                )

        await self.get_record(_record)
        return outcome[0] if outcome else None

    async def healthcheck(self, callback: RecordCallback | None = None) -> None:
        """Probe the external system and announce ONLINE or OFFLINE.

        On failure emits OFFLINE and calls ``callback(None, error)``.
        On success emits ONLINE and calls ``callback(records, None)``.
        """
        report = await self.probe()
        if report is None:
            self.logger.debug(
                f"Healthcheck for {self.id} produced no result",
                extra=self._extra(),
            )
            return

        if report.is_online:
            self.emit_online()
            self.logger.debug(
                f"Healthcheck successful for {self.id}: "
                f"{len(report.result or [])} record(s) returned",
                extra=self._extra(),
            )
            if callback:
                await self._deliver(callback, report.result, None)
        else:
            self.emit_offline()
            self.logger.error(
                f"Healthcheck failed for {self.id}: {report.error!r}",
                extra=self._extra(),
            )
            if callback:
                await self._deliver(callback, None, report.error)

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def on(self, event: str, listener: Listener) -> None:
        self.emitter.on(event, listener)

    def off(self, event: str, listener: Listener) -> None:
        self.emitter.off(event, listener)

    def emit_online(self) -> None:
        self.logger.info(f"Instance is available: {self.id}", extra=self._extra())
        self.emit_status(HealthStatus.ONLINE)

    def emit_offline(self) -> None:
        self.logger.error(f"Instance is unavailable: {self.id}", extra=self._extra())
        self.emit_status(HealthStatus.OFFLINE)

    def emit_status(self, status: HealthStatus) -> None:
        """Publish ``status`` to the host with a payload naming this instance."""
        self.emitter.emit(status.value, {"id": self.id})

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    async def get_record(self, callback: RecordCallback) -> None:
        """Fetch change requests and pass them to ``callback``.

        The callback receives a list of ChangeTicket in source order, or
        (None, error). With the DROP policy a body-less response invokes
        no callback at all.
        """
        try:
            envelope = await self._connector.get()
        except Exception as e:
            self.logger.warning(
                f"GET against {self.properties.target_resource_name} failed: {e!r}",
                extra=self._extra(),
            )
            await self._deliver(callback, None, e)
            return

        await self._complete("GET", envelope, self.normalizer.parse_many, callback)

    async def post_record(
        self,
        callback: RecordCallback,
        fields: Mapping[str, Any] | None = None,
    ) -> None:
        """Create a change request and pass the normalized result to ``callback``.

        Args:
            callback: Receives (ChangeTicket, None) or (None, error).
            fields: Column values for the new record (optional).
        """
        try:
            envelope = await self._connector.post(fields)
        except Exception as e:
            self.logger.warning(
                f"POST against {self.properties.target_resource_name} failed: {e!r}",
                extra=self._extra(),
            )
            await self._deliver(callback, None, e)
            return

        await self._complete("POST", envelope, self.normalizer.parse_one, callback)

    async def _complete(
        self,
        method: str,
        envelope: ResponseEnvelope,
        parse: Callable[[str], T],
        callback: RecordCallback,
    ) -> None:
        if not envelope.has_body:
            if self.missing_body_policy is MissingBodyPolicy.DROP:
                self.logger.warning(
                    f"{method} response for {self.id} has no body; dropping",
                    extra=self._extra(),
                )
                return
            await self._deliver(
                callback,
                None,
                EmptyResponseError(f"{method} response has no body"),
            )
            return

        try:
            result = parse(envelope.body)
        except MalformedPayloadError as e:
            self.logger.error(
                f"{method} response for {self.id} is malformed: {e}",
                extra=self._extra(),
            )
            await self._deliver(callback, None, e)
            return

        await self._deliver(callback, result, None)

    async def _deliver(
        self,
        callback: RecordCallback,
        result: Any,
        error: BaseException | None,
    ) -> None:
        """Invoke a host callback once, awaiting it if it is a coroutine."""
        try:
            outcome = callback(result, error)
            if inspect.isawaitable(outcome):
                await outcome
        except Exception as e:
            self.logger.error(
                f"Callback for {self.id} raised: {e}",
                exc_info=True,
                extra=self._extra(),
            )

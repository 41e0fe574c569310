"""Fake ConnectorPort implementation for testing."""

from collections.abc import Mapping
from typing import Any

from changebridge.core.models import AdapterProperties, ResponseEnvelope
from changebridge.core.ports import ConnectorPort


class FakeConnectorPort(ConnectorPort):
    """In-memory connector for testing.

    Tests queue envelopes or exceptions for get() and post(); each call
    pops the next entry. When a queue is empty the default response is
    returned (an envelope with an empty result set).
    """

    def __init__(self, properties: AdapterProperties | None = None) -> None:
        """Initialize with empty response queues."""
        self.properties = properties
        self.get_responses: list[ResponseEnvelope | Exception] = []
        self.post_responses: list[ResponseEnvelope | Exception] = []
        self.posted_fields: list[Mapping[str, Any] | None] = []
        self.get_call_count = 0
        self.post_call_count = 0
        self.closed = False

    def queue_get(self, response: ResponseEnvelope | Exception) -> None:
        """Queue the outcome of the next get() call."""
        self.get_responses.append(response)

    def queue_post(self, response: ResponseEnvelope | Exception) -> None:
        """Queue the outcome of the next post() call."""
        self.post_responses.append(response)

    async def get(self) -> ResponseEnvelope:
        self.get_call_count += 1
        return self._next(self.get_responses, '{"result": []}')

    async def post(self, fields: Mapping[str, Any] | None = None) -> ResponseEnvelope:
        self.post_call_count += 1
        self.posted_fields.append(fields)
        return self._next(self.post_responses, '{"result": {}}')

    async def close(self) -> None:
        self.closed = True

    @staticmethod
    def _next(
        queue: list[ResponseEnvelope | Exception], default_body: str
    ) -> ResponseEnvelope:
        if not queue:
            return ResponseEnvelope(body=default_body, status_code=200)
        outcome = queue.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def reset(self) -> None:
        """Reset queued responses and counters."""
        self.get_responses.clear()
        self.post_responses.clear()
        self.posted_fields.clear()
        self.get_call_count = 0
        self.post_call_count = 0
        self.closed = False

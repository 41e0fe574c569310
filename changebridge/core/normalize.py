"""Record normalization for change requests.

Turns the ticketing system's JSON result sets into ChangeTicket
objects. This is a pure rename projection: no value is validated,
coerced or recomputed.
"""

import json
from collections.abc import Mapping
from typing import Any

from .errors import MalformedPayloadError
from .models import ChangeTicket

# Source field -> normalized field
FIELD_MAP: tuple[tuple[str, str], ...] = (
    ("number", "change_ticket_number"),
    ("active", "active"),
    ("priority", "priority"),
    ("description", "description"),
    ("work_start", "work_start"),
    ("work_end", "work_end"),
    ("sys_id", "change_ticket_key"),
)


class RecordNormalizer:
    """Decodes response bodies and projects source records."""

    def normalize(self, source: Mapping[str, Any]) -> ChangeTicket:
        """Project a single source record onto a ChangeTicket.

        Args:
            source: One element of the external ``result`` payload.

        Returns:
            ChangeTicket with the source values carried over unchanged.
            Absent source fields become None.

        Raises:
            MalformedPayloadError: If source is not a JSON object.
        """
        if not isinstance(source, Mapping):
            raise MalformedPayloadError(
                f"Expected record object, got {type(source).__name__}"
            )
        return ChangeTicket(
            **{target: source.get(origin) for origin, target in FIELD_MAP}
        )

    def parse_many(self, body: str) -> list[ChangeTicket]:
        """Normalize a ``{"result": [...]}`` body, preserving source order.

        Raises:
            MalformedPayloadError: If the body is not JSON or ``result``
                is not a list of objects.
        """
        result = self._decode_result(body)
        if not isinstance(result, list):
            raise MalformedPayloadError(
                f"Expected result array, got {type(result).__name__}"
            )
        return [self.normalize(item) for item in result]

    def parse_one(self, body: str) -> ChangeTicket:
        """Normalize a ``{"result": {...}}`` body.

        Raises:
            MalformedPayloadError: If the body is not JSON or ``result``
                is not an object.
        """
        return self.normalize(self._decode_result(body))

    @staticmethod
    def _decode_result(body: str) -> Any:
        try:
            payload = json.loads(body)
        except (ValueError, TypeError, RecursionError) as e:
            raise MalformedPayloadError(f"Response body is not valid JSON: {e}") from e

        if not isinstance(payload, dict) or "result" not in payload:
            raise MalformedPayloadError("Response body has no 'result' member")
        return payload["result"]

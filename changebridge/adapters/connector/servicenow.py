"""ServiceNow Table API connector.

Implements ConnectorPort by issuing GET and POST requests against a
ServiceNow table (``change_request`` by default). Responses are handed
back undecoded; only bad responses are classified as errors here.
"""

import logging
from collections.abc import Mapping
from typing import Any

import httpx

from changebridge.core.errors import InstanceHibernatingError, TransportError
from changebridge.core.models import AdapterProperties, ResponseEnvelope
from changebridge.core.ports import ConnectorPort

logger = logging.getLogger(__name__)

HIBERNATION_MARKER = "Instance Hibernating page"


class ServiceNowConnector(ConnectorPort):
    """ServiceNow-backed connector via the REST Table API."""

    def __init__(
        self,
        properties: AdapterProperties,
        timeout_seconds: float = 30.0,
        get_limit: int = 1,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize ServiceNow connector.

        Args:
            properties: Instance URL, credentials and table name.
            timeout_seconds: Per-request timeout.
            get_limit: Value for ``sysparm_limit`` on GET requests.
            transport: Optional httpx transport (used by tests).
        """
        self.properties = properties
        self.api_url = properties.url.rstrip("/")
        self.table = properties.target_resource_name
        self.get_limit = get_limit
        self.client = httpx.AsyncClient(
            base_url=self.api_url,
            auth=httpx.BasicAuth(
                properties.auth.username, properties.auth.password
            ),
            headers={
                "Accept": "application/json",
                "Content-Type": "application/json",
            },
            timeout=timeout_seconds,
            transport=transport,
        )

    @property
    def table_path(self) -> str:
        return f"/api/now/table/{self.table}"

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.client.aclose()

    async def close(self) -> None:
        """Close the httpx client and clean up resources."""
        await self.client.aclose()

    async def get(self) -> ResponseEnvelope:
        """Return the first page of records from the table."""
        try:
            response = await self.client.get(
                self.table_path,
                params={"sysparm_limit": self.get_limit},
            )
        except httpx.HTTPError as e:
            logger.error(f"GET {self.table_path} failed: {e}")
            raise TransportError(f"GET {self.table_path} failed: {e}") from e

        return self._process_response("GET", response)

    async def post(self, fields: Mapping[str, Any] | None = None) -> ResponseEnvelope:
        """Create a record in the table."""
        try:
            response = await self.client.post(
                self.table_path,
                json=dict(fields or {}),
            )
        except httpx.HTTPError as e:
            logger.error(f"POST {self.table_path} failed: {e}")
            raise TransportError(f"POST {self.table_path} failed: {e}") from e

        return self._process_response("POST", response)

    def _process_response(self, method: str, response: httpx.Response) -> ResponseEnvelope:
        """Classify a response as a usable envelope or an error.

        Raises:
            TransportError: For any non-2xx status.
            InstanceHibernatingError: If the instance served its
                hibernation page instead of data.
        """
        if not response.is_success:
            logger.warning(
                f"{method} {self.table_path} returned {response.status_code}",
                extra={"status_code": response.status_code},
            )
            raise TransportError(
                f"{method} {self.table_path} returned {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )

        if self._is_hibernating(response):
            logger.warning(f"ServiceNow instance {self.api_url} is hibernating")
            raise InstanceHibernatingError(
                "Service Now instance is hibernating",
                status_code=response.status_code,
                body=response.text,
            )

        # An empty entity is reported as "no body" rather than ""
        body = response.text if response.content else None
        return ResponseEnvelope(
            body=body,
            status_code=response.status_code,
            headers=dict(response.headers),
        )

    @staticmethod
    def _is_hibernating(response: httpx.Response) -> bool:
        text = response.text
        return (
            response.status_code == 200
            and HIBERNATION_MARKER in text
            and "<html>" in text
        )

"""Core domain logic for the changebridge adapter.

This package contains zero external dependencies and represents
the pure business logic of the application. The transport and the
process entry point are handled by the adapters package.
"""

from .adapter import ChangeRequestAdapter
from .errors import (
    AdapterError,
    ConfigError,
    EmptyResponseError,
    InstanceHibernatingError,
    MalformedPayloadError,
    TransportError,
)
from .events import EventEmitter
from .models import (
    AdapterProperties,
    ChangeTicket,
    Credentials,
    HealthReport,
    HealthStatus,
    MissingBodyPolicy,
    ResponseEnvelope,
)

__all__ = [
    "AdapterError",
    "AdapterProperties",
    "ChangeRequestAdapter",
    "ChangeTicket",
    "ConfigError",
    "Credentials",
    "EmptyResponseError",
    "EventEmitter",
    "HealthReport",
    "HealthStatus",
    "InstanceHibernatingError",
    "MalformedPayloadError",
    "MissingBodyPolicy",
    "ResponseEnvelope",
    "TransportError",
]

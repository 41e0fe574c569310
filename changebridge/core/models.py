"""Domain models for the changebridge adapter.

All models in this module use only Python standard library types,
ensuring zero external dependencies in the core domain.
"""

from collections.abc import Iterator, Mapping
from dataclasses import asdict, dataclass, field, fields
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any

from .errors import ConfigError

DEFAULT_TARGET_RESOURCE = "change_request"


@dataclass(frozen=True)
class Credentials:
    """Login credentials for the external ticketing system."""

    username: str
    password: str = field(repr=False)


@dataclass(frozen=True)
class AdapterProperties:
    """Configuration bundle for one adapter instance.

    Immutable after construction. The connector is built from these
    values exactly once.
    """

    url: str
    auth: Credentials
    target_resource_name: str = DEFAULT_TARGET_RESOURCE

    def __post_init__(self) -> None:
        """Validate property invariants on creation."""
        if not self.url or not self.url.strip():
            raise ValueError("url must be a non-empty string")
        if not self.target_resource_name or not self.target_resource_name.strip():
            raise ValueError("target_resource_name must be a non-empty string")

    @classmethod
    def from_mapping(cls, props: Mapping[str, Any]) -> "AdapterProperties":
        """Build properties from the host's configuration mapping.

        Accepts ``{url, auth: {username, password}, targetResourceName}``.
        The older ``serviceNowTable`` key is read when
        ``targetResourceName`` is absent.

        Raises:
            ConfigError: If url or credentials are missing or invalid.
        """
        try:
            resource = (
                props.get("targetResourceName")
                or props.get("serviceNowTable")
                or DEFAULT_TARGET_RESOURCE
            )
            auth = props["auth"]
            return cls(
                url=props["url"],
                auth=Credentials(
                    username=auth["username"], password=auth["password"]
                ),
                target_resource_name=resource,
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise ConfigError(f"Missing adapter property: {e}") from e
        except ValueError as e:
            raise ConfigError(str(e)) from e


@dataclass(frozen=True)
class ResponseEnvelope:
    """Raw response handed back by a connector.

    ``body`` is the undecoded response text. It is ``None`` when the
    connector received no body at all, which is distinct from an empty
    string.
    """

    body: str | None = None
    status_code: int | None = None
    headers: Mapping[str, str] | MappingProxyType[str, str] = field(
        default_factory=dict
    )

    def __post_init__(self) -> None:
        """Convert headers dict to read-only proxy."""
        if isinstance(self.headers, dict):
            object.__setattr__(self, "headers", MappingProxyType(self.headers))

    @property
    def has_body(self) -> bool:
        return self.body is not None


@dataclass(frozen=True, eq=False)
class ChangeTicket(Mapping[str, Any]):
    """Normalized change request.

    The core's fixed-shape representation of an external ticket. Values
    are carried over from the source record as-is; only the keys are
    renamed. Reads like a read-only mapping, so
    ``ticket["change_ticket_number"]`` and ``ticket == {...}`` both work.
    """

    change_ticket_number: Any
    active: Any
    priority: Any
    description: Any
    work_start: Any
    work_end: Any
    change_ticket_key: Any  # external system's sys_id

    def __getitem__(self, key: str) -> Any:
        if key not in TICKET_FIELDS:
            raise KeyError(key)
        return getattr(self, key)

    def __iter__(self) -> Iterator[str]:
        return iter(TICKET_FIELDS)

    def __len__(self) -> int:
        return len(TICKET_FIELDS)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


TICKET_FIELDS: tuple[str, ...] = tuple(f.name for f in fields(ChangeTicket))


class HealthStatus(Enum):
    """Reachability of the external system as announced to the host.

    There is no stored "unknown" state: every health check derives the
    status from scratch and only these two values are ever emitted.
    """

    ONLINE = "ONLINE"
    OFFLINE = "OFFLINE"


@dataclass(frozen=True)
class HealthReport:
    """Outcome of a single health probe."""

    status: HealthStatus
    checked_at: datetime
    result: list[ChangeTicket] | None = None
    error: BaseException | None = None

    @property
    def is_online(self) -> bool:
        return self.status is HealthStatus.ONLINE


class MissingBodyPolicy(Enum):
    """What to do when a connector response carries no body.

    - DROP: finish the call without invoking the callback
    - ERROR: invoke the callback with an EmptyResponseError
    """

    DROP = "drop"
    ERROR = "error"

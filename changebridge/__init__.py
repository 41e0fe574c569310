"""changebridge: ServiceNow change request adapter for orchestration hosts."""

__version__ = "0.1.0"

"""External adapters for the changebridge adapter.

This package contains all external dependencies (httpx, signal
handling) and provides implementations of the core port interfaces.

Adapter Organization:

- connector/: Transport connectors for the ticketing system (ServiceNow)
- scheduler/: Drivers for periodic health checks (daemon)
"""

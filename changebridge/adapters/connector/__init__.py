"""Transport connectors for the ticketing system.

Implementations:
- ServiceNow Table API (httpx)
"""

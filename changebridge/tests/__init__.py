"""Test suite for the changebridge adapter.

Organized into three categories:

1. core/: Unit tests for core domain logic
   - Minimal dependencies, fast execution
   - Uses in-memory fakes for ports

2. adapters/: Tests for adapter implementations
   - ServiceNow connector against httpx.MockTransport
   - Health check scheduler

3. fakes/: Port implementations for testing
   - In-memory ConnectorPort and a recording host callback
"""

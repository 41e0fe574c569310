"""Scheduler adapters for driving periodic health checks.

Implementations:
- Daemon: long-running asyncio loop
"""

"""Fake/mock implementations of core ports for testing.

These in-memory implementations allow core domain logic to be tested
without external dependencies:

- FakeConnectorPort: Queued envelopes and errors for get/post
- RecordingCallback: Captured host callback invocations for assertion
"""

from .callback import RecordingCallback
from .connector import FakeConnectorPort

__all__ = [
    "FakeConnectorPort",
    "RecordingCallback",
]

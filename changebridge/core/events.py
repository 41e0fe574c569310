"""In-process event publishing.

A small observer registry the host subscribes to for adapter state
changes. Emission is synchronous: every listener runs before
``emit()`` returns, in the order it was registered.
"""

import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

Listener = Callable[[dict[str, Any]], Any]


class EventEmitter:
    """Registry of named-event listeners."""

    def __init__(self) -> None:
        self._listeners: dict[str, list[tuple[Listener, bool]]] = {}

    def on(self, event: str, listener: Listener) -> None:
        """Register a listener for every future emission of ``event``."""
        self._listeners.setdefault(event, []).append((listener, False))

    def once(self, event: str, listener: Listener) -> None:
        """Register a listener that is removed after its first call."""
        self._listeners.setdefault(event, []).append((listener, True))

    def off(self, event: str, listener: Listener) -> None:
        """Remove the earliest registration of ``listener`` for ``event``.

        Unknown listeners are ignored.
        """
        entries = self._listeners.get(event, [])
        for index, (registered, _) in enumerate(entries):
            if registered == listener:
                del entries[index]
                break

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, []))

    def emit(self, event: str, payload: dict[str, Any]) -> bool:
        """Deliver ``payload`` to all listeners of ``event``.

        A listener that raises is logged and skipped; the remaining
        listeners still run.

        Returns:
            True if the event had at least one listener.
        """
        entries = self._listeners.get(event)
        if not entries:
            return False

        # Snapshot so listeners can (un)register during delivery
        snapshot = list(entries)
        self._listeners[event] = [entry for entry in entries if not entry[1]]

        for listener, _ in snapshot:
            try:
                listener(payload)
            except Exception as e:
                logger.error(
                    f"Listener for {event} raised: {e}",
                    exc_info=True,
                    extra={"event": event},
                )
        return True

"""Named-event notifications.

Listeners observe a run (``complete``, ``error``, ``progress``) for
integration purposes. They never influence control flow: an exception
raised by a listener is logged and the remaining listeners still run.
"""

import logging
from collections import defaultdict
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

Listener = Callable[..., Any]


class EventEmitter:
    """Minimal synchronous event emitter.

    Example:
        ```python
        emitter = EventEmitter()
        emitter.on("complete", lambda: print("done"))
        emitter.emit("complete")
        ```
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = defaultdict(list)

    def on(self, event: str, listener: Listener) -> None:
        """Subscribe a listener to an event."""
        self._listeners[event].append(listener)

    def off(self, event: str, listener: Listener) -> None:
        """Unsubscribe a listener. Unknown listeners are ignored."""
        if listener in self._listeners.get(event, []):
            self._listeners[event].remove(listener)

    def listeners(self, event: str) -> list[Listener]:
        """Return the listeners currently subscribed to an event."""
        return list(self._listeners.get(event, []))

    def emit(self, event: str, *args: Any) -> int:
        """Call every listener of an event with the given arguments.

        Returns:
            Number of listeners called.
        """
        listeners = self.listeners(event)
        for listener in listeners:
            try:
                listener(*args)
            except Exception:
                logger.exception(f"Listener for '{event}' event failed")
        return len(listeners)

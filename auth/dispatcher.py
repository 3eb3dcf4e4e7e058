"""
auth/dispatcher.py -- Synchronous in-process event bus for auth events.

Pattern: Observer. Producers (SessionGuard, AccountService) call dispatch();
consumers register callables per event class with listen().

Dispatch is in-line: every listener runs on the caller's thread, in
registration order, before dispatch() returns. A listener exception stops
the remaining listeners and propagates to the producer unchanged -- an audit
sink that cannot write must fail the request that caused the event.

Matching is by exact class (no isinstance walk), so the set of events a
listener receives is exactly the set it asked for.

Usage:
    dispatcher = EventDispatcher()
    dispatcher.listen(Login, handler)
    dispatcher.dispatch(Login(guard="web", user=user))
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable
from typing import Any

logger = logging.getLogger("authlog.auth.dispatcher")

Listener = Callable[[Any], None]


class EventDispatcher:
    def __init__(self) -> None:
        self._listeners: dict[type, list[Listener]] = defaultdict(list)

    def listen(self, event_type: type, listener: Listener) -> None:
        """Register listener to be called with every dispatched event_type instance."""
        self._listeners[event_type].append(listener)

    def has_listeners(self, event_type: type) -> bool:
        return bool(self._listeners.get(event_type))

    def forget(self, event_type: type) -> None:
        """Remove every listener registered for event_type."""
        self._listeners.pop(event_type, None)

    def dispatch(self, event: Any) -> None:
        """Call each listener registered for type(event), in registration order."""
        listeners = self._listeners.get(type(event), [])
        logger.debug("Dispatching %s to %d listener(s)", type(event).__name__, len(listeners))
        for listener in list(listeners):
            listener(event)

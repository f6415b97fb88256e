# backend/parkmap/mapstate/events.py
from collections import defaultdict
from typing import Any, Callable, Dict, List

Handler = Callable[..., Any]


class Emitter:
    """Synchronous named-event emitter.

    Handlers run in subscription order; an exception in a handler propagates
    to the caller of ``emit``.
    """

    def __init__(self):
        self._handlers: Dict[str, List[Handler]] = defaultdict(list)

    def on(self, event: str, handler: Handler) -> Callable[[], None]:
        self._handlers[event].append(handler)
        return lambda: self.off(event, handler)

    def off(self, event: str, handler: Handler) -> None:
        handlers = self._handlers.get(event, [])
        if handler in handlers:
            handlers.remove(handler)

    def emit(self, event: str, *args: Any) -> None:
        for handler in list(self._handlers.get(event, [])):
            handler(*args)

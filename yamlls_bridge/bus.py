"""Event bus used by the preference store and the workspace."""

from typing import Callable, Dict, List

from pydantic import BaseModel

from .util.log import Log

Handler = Callable[[BaseModel], None]


class EventBus:
    """Synchronous pub/sub.

    Handlers run on the publishing thread, in subscription order. A
    failing handler is logged and does not stop delivery to the others.
    """

    def __init__(self, name: str = "bus"):
        self._subscribers: Dict[str, List[Handler]] = {}
        self._log = Log.create({"service": name})

    def subscribe(self, event_type: str, handler: Handler) -> Callable[[], None]:
        """Subscribe to an event type. Returns unsubscribe function."""
        if event_type not in self._subscribers:
            self._subscribers[event_type] = []

        self._subscribers[event_type].append(handler)

        def unsubscribe():
            if event_type in self._subscribers:
                try:
                    self._subscribers[event_type].remove(handler)
                except ValueError:
                    pass

        return unsubscribe

    def subscribers(self, event_type: str) -> List[Handler]:
        return list(self._subscribers.get(event_type, []))

    def publish(self, event_type: str, event: BaseModel) -> None:
        """Publish an event synchronously."""
        for handler in self.subscribers(event_type):
            try:
                handler(event)
            except Exception as e:
                self._log.error("Event handler failed", {"event": event_type, "error": str(e)})

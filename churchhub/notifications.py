import json
import logging
import queue
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChangeEvent:
    """A row-level change, shaped like the payload of a database change feed."""

    table: str
    event_type: str
    new: Dict[str, Any] = field(default_factory=dict)
    old: Dict[str, Any] = field(default_factory=dict)


class Subscription:
    """
    One listener on the channel. Holds a bounded queue that the channel
    pushes matching events into. Must be closed when the consumer goes away;
    it also works as a context manager for that.
    """

    def __init__(self, channel, predicate: Callable[[Any], bool], maxsize: int = 10):
        self._channel = channel
        self.predicate = predicate
        self.queue = queue.Queue(maxsize=maxsize)
        self.closed = False

    def push(self, item):
        self.queue.put_nowait(item)

    def get(self, timeout: Optional[float] = None):
        """Next delivered item, or None when nothing arrives within timeout."""
        if self.closed:
            return None
        try:
            return self.queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def close(self):
        if not self.closed:
            self.closed = True
            self._channel.remove(self)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


class ChangeChannel:
    """
    Manages change-notification listeners and message broadcasting.
    Uses thread-safe queues for listeners.
    """

    def __init__(self, maxsize: int = 10):
        self.listeners = []
        self.maxsize = maxsize
        self._lock = threading.Lock()

    def listen(self, predicate: Callable[[Any], bool] = lambda event: True) -> Subscription:
        """
        Adds a new listener whose predicate decides which events it receives.
        Returns the subscription for the listener to consume events from.
        """
        subscription = Subscription(self, predicate, maxsize=self.maxsize)
        with self._lock:
            self.listeners.append(subscription)
            count = len(self.listeners)
        logger.info(f"Change listener added. Total listeners: {count}")
        return subscription

    def listen_to_row_updates(self, table: str, user_id: int) -> Subscription:
        """Listener for UPDATE events on `table` whose new row belongs to user_id."""

        def predicate(event):
            return (
                isinstance(event, ChangeEvent)
                and event.table == table
                and event.event_type == "UPDATE"
                and event.new.get("user_id") == user_id
            )

        return self.listen(predicate)

    def remove(self, subscription: Subscription):
        with self._lock:
            if subscription in self.listeners:
                self.listeners.remove(subscription)
            count = len(self.listeners)
        logger.info(f"Change listener removed. Total listeners: {count}")

    def announce(self, event: ChangeEvent) -> int:
        """
        Sends an event to every listener whose predicate matches.
        Removes listeners whose queues are full (indicating a stalled consumer).
        Returns the number of listeners the event was delivered to.
        """
        delivered = 0
        with self._lock:
            listeners = list(self.listeners)

        for subscription in listeners:
            try:
                if not subscription.predicate(event):
                    continue
                subscription.push(event)
                delivered += 1
            except queue.Full:
                logger.info("Change listener dropped (queue full)")
                subscription.close()
            except Exception as e:
                logger.error(f"Error announcing to change listener: {e}")
                subscription.close()

        logger.debug(f"Announced {event.table} {event.event_type} to {delivered} listeners")
        return delivered

    def dispose(self):
        """Closes every listener. Called once at shutdown."""
        with self._lock:
            listeners = list(self.listeners)
        for subscription in listeners:
            subscription.close()


def format_sse(data: dict, event: str = None) -> str:
    """
    Formats data into the Server-Sent Event message format.
    Expects data as a dictionary, which will be converted to JSON.

    Args:
        data: The dictionary payload for the event.
        event: Optional event type name.

    Returns:
        A string in the Server-Sent Events wire format.
    """
    try:
        json_data = json.dumps(data)
        msg = f"data: {json_data}\n\n"
        if event is not None:
            msg = f"event: {event}\n{msg}"
        return msg
    except TypeError as e:
        logger.error(f"Error formatting SSE data: {e}. Data: {data}")
        error_data = json.dumps({"error": "Failed to serialize event data", "details": str(e)})
        return f"event: error\ndata: {error_data}\n\n"

"""
In-process publish/subscribe transport.

Topics are plain names. Callbacks run synchronously in the publisher's
thread, in subscription order.
"""

import logging
import threading
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)


def resolve_topic(name: str, node_name: str = "") -> str:
    """
    Resolve a topic name against a node.

    ``~name`` is private to the node (``/<node>/name``), ``name`` is global
    (``/name``), absolute names are kept.

    Parameters
    ----------
    name : str
        Topic name as given by the user.
    node_name : str
        Node owning the private namespace.

    Returns
    -------
    str
        Absolute topic name.
    """
    if not name:
        raise ValueError("Empty topic name")
    if name.startswith("~"):
        if not node_name:
            raise ValueError(f"Private topic '{name}' needs a node name")
        return "/" + node_name.strip("/") + "/" + name[1:].lstrip("/")
    if name.startswith("/"):
        return name
    return "/" + name


class Subscription:
    """Handle returned by ``MessageBus.subscribe``."""

    def __init__(self, bus: "MessageBus", topic: str, callback: Callable[[Any], None]):
        self.bus = bus
        self.topic = topic
        self.callback = callback
        self.active = True

    def shutdown(self) -> None:
        """Stop receiving messages. Safe to call more than once."""
        if self.active:
            self.active = False
            self.bus._remove(self)


class MessageBus:
    """Named-topic message bus."""

    def __init__(self):
        self._subscriptions: Dict[str, List[Subscription]] = {}
        self._lock = threading.Lock()

    def subscribe(self, topic: str, callback: Callable[[Any], None]) -> Subscription:
        """
        Register a callback for a topic.

        Parameters
        ----------
        topic : str
            Absolute topic name.
        callback : Callable[[Any], None]
            Called with each published message.

        Returns
        -------
        Subscription
            Handle used to unsubscribe.
        """
        sub = Subscription(self, topic, callback)
        with self._lock:
            self._subscriptions.setdefault(topic, []).append(sub)
        logger.debug("Subscribed to %s", topic)
        return sub

    def publish(self, topic: str, msg: Any) -> int:
        """
        Deliver a message to every current subscriber of a topic.

        Returns
        -------
        int
            Number of callbacks invoked.
        """
        with self._lock:
            subscribers = list(self._subscriptions.get(topic, []))

        delivered = 0
        for sub in subscribers:
            if not sub.active:
                continue
            sub.callback(msg)
            delivered += 1

        if delivered == 0:
            logger.debug("No subscribers on %s", topic)
        return delivered

    def subscriber_count(self, topic: str) -> int:
        with self._lock:
            return len(self._subscriptions.get(topic, []))

    def topics(self) -> List[str]:
        """Topics with at least one subscriber."""
        with self._lock:
            return sorted(t for t, subs in self._subscriptions.items() if subs)

    def _remove(self, sub: Subscription) -> None:
        with self._lock:
            subs = self._subscriptions.get(sub.topic, [])
            if sub in subs:
                subs.remove(sub)
            if not subs:
                self._subscriptions.pop(sub.topic, None)
        logger.debug("Unsubscribed from %s", sub.topic)


class OneShotListener:
    """
    Subscription whose handler runs at most once.

    The first message consumes the listener: the subscription is shut down
    and any message delivered afterwards (including one racing in from
    another thread) is dropped.
    """

    def __init__(self, bus: MessageBus, topic: str, handler: Callable[[Any], None]):
        self.topic = topic
        self.handler = handler
        self._consumed = False
        self._lock = threading.Lock()
        self.dropped = 0
        self.subscription = bus.subscribe(topic, self._on_message)

    @property
    def consumed(self) -> bool:
        return self._consumed

    def _on_message(self, msg: Any) -> None:
        with self._lock:
            if self._consumed:
                self.dropped += 1
                return
            self._consumed = True
        self.subscription.shutdown()
        self.handler(msg)

    def cancel(self) -> None:
        """Give up waiting without handling any message."""
        with self._lock:
            self._consumed = True
        self.subscription.shutdown()

"""Explicit "data changed" signals between the data owners and the readiness view."""

import logging
from collections.abc import Callable
from enum import Enum

logger = logging.getLogger(__name__)


class Topic(str, Enum):
    INTERVIEWS = "interviews"
    JOBS = "jobs"
    ACTIVITIES = "activities"
    ATTEMPTS = "attempts"
    CHECKLISTS = "checklists"


Listener = Callable[[Topic], None]


class InvalidationBus:
    """In-process observer: owners publish a topic, subscribers get called with it."""

    def __init__(self) -> None:
        self._listeners: dict[Topic, list[Listener]] = {}

    def subscribe(self, topic: Topic, listener: Listener) -> None:
        listeners = self._listeners.setdefault(topic, [])
        if listener not in listeners:
            listeners.append(listener)

    def unsubscribe(self, topic: Topic, listener: Listener) -> None:
        listeners = self._listeners.get(topic, [])
        if listener in listeners:
            listeners.remove(listener)

    def publish(self, topic: Topic) -> int:
        """Notify every listener of ``topic``. Returns how many were notified."""
        listeners = list(self._listeners.get(topic, []))
        logger.debug("Publishing '%s' to %d listeners", topic.value, len(listeners))
        for listener in listeners:
            listener(topic)
        return len(listeners)

    def listener_count(self, topic: Topic) -> int:
        return len(self._listeners.get(topic, []))

"""In-process publish/subscribe for document changes."""
from __future__ import annotations

import logging
from collections import defaultdict
from threading import Lock
from typing import Any, Callable, DefaultDict, List, Tuple

logger = logging.getLogger(__name__)

Callback = Callable[[Any], None]
Topic = Tuple[str, str]


class ChangeFeed:
    def __init__(self) -> None:
        self._subscribers: DefaultDict[Topic, List[Callback]] = defaultdict(list)
        self._lock = Lock()

    def subscribe(self, kind: str, user_id: str, callback: Callback) -> Callable[[], None]:
        topic = (kind, user_id)
        with self._lock:
            self._subscribers[topic].append(callback)

        def unsubscribe() -> None:
            with self._lock:
                callbacks = self._subscribers.get(topic)
                if callbacks and callback in callbacks:
                    callbacks.remove(callback)
                if not callbacks:
                    self._subscribers.pop(topic, None)

        return unsubscribe

    def publish(self, kind: str, user_id: str, document: Any) -> None:
        with self._lock:
            callbacks = list(self._subscribers.get((kind, user_id), ()))
        for callback in callbacks:
            try:
                callback(document)
            except Exception:
                logger.exception("Change subscriber failed for %s/%s", kind, user_id)

    def subscriber_count(self, kind: str, user_id: str) -> int:
        with self._lock:
            return len(self._subscribers.get((kind, user_id), ()))


change_feed = ChangeFeed()

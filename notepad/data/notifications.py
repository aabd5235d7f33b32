from __future__ import annotations

import logging
import threading
from collections.abc import Callable

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[str], None]


def _segments(path: str) -> tuple[str, ...]:
    cleaned = path.strip().strip("/")
    return tuple(cleaned.split("/")) if cleaned else ()


class Subscription:
    def __init__(
        self,
        notifier: ChangeNotifier,
        path: str,
        callback: ChangeCallback,
        notify_for_descendants: bool,
    ) -> None:
        self._notifier = notifier
        self.path = "/".join(_segments(path))
        self.callback = callback
        self.notify_for_descendants = notify_for_descendants
        self._segments = _segments(path)

    @property
    def active(self) -> bool:
        return self._notifier.is_registered(self)

    def cancel(self) -> None:
        self._notifier.unregister(self)

    def wants(self, changed: tuple[str, ...]) -> bool:
        """Return True if a change on ``changed`` concerns this observer.

        An observer hears about its own path, about paths below it when it
        asked for descendants, and about any ancestor of its path, since a
        change to a collection may touch every item in it.
        """
        mine = self._segments
        if changed == mine:
            return True
        if len(changed) < len(mine):
            return mine[: len(changed)] == changed
        return self.notify_for_descendants and changed[: len(mine)] == mine


class ChangeNotifier:
    """Publish/subscribe hub for "this resource path changed" events."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._subscriptions: list[Subscription] = []

    def register(
        self,
        path: str,
        callback: ChangeCallback,
        notify_for_descendants: bool = True,
    ) -> Subscription:
        subscription = Subscription(self, path, callback, notify_for_descendants)
        with self._lock:
            self._subscriptions.append(subscription)
        logger.debug("Observer registered on '%s'", subscription.path)
        return subscription

    def unregister(self, subscription: Subscription) -> bool:
        with self._lock:
            try:
                self._subscriptions.remove(subscription)
            except ValueError:
                return False
        logger.debug("Observer unregistered from '%s'", subscription.path)
        return True

    def is_registered(self, subscription: Subscription) -> bool:
        with self._lock:
            return subscription in self._subscriptions

    def observer_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def notify_change(self, path: str) -> int:
        """Deliver ``path`` to every interested observer.

        Returns the number of observers that were called. A failing observer
        is logged and does not prevent delivery to the others.
        """
        changed = _segments(path)
        normalized = "/".join(changed)
        with self._lock:
            targets = [s for s in self._subscriptions if s.wants(changed)]

        logger.debug("Change on '%s' -> %d observer(s)", normalized, len(targets))
        for subscription in targets:
            try:
                subscription.callback(normalized)
            except Exception:
                logger.exception(
                    "Observer on '%s' failed handling change on '%s'",
                    subscription.path,
                    normalized,
                )
        return len(targets)

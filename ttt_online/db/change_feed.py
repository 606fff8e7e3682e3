"""
In-process state change feed.

Every committed record of a game is pushed to that game's subscribers. A subscriber sees full records, never diffs,
and can cancel at any time; a consumer blocked waiting for the next record wakes up and stops.
"""

import logging
import queue
import threading
from copy import deepcopy
from typing import Iterator, Optional
from uuid import UUID

from ttt_online.core.models import GameModel

logger = logging.getLogger(__name__)

# placed on a subscription's queue to wake up a blocked consumer after cancel()
_CANCELLED = object()


class Subscription:
    """
    Lazy, unbounded stream of GameModel snapshots for one game.
    ----
    Records arrive in strictly increasing version order: a record at or below the last delivered version is dropped,
    so a late publish or a stale priming read can never move a subscriber backwards.
    """

    def __init__(self, feed: "GameFeed", game_id: UUID) -> None:
        self.game_id = game_id
        self._feed = feed
        self._queue: "queue.Queue[object]" = queue.Queue()
        self._cancelled = threading.Event()
        self._order_lock = threading.Lock()
        self.last_version: Optional[int] = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def deliver(self, game: GameModel) -> bool:
        """Queue a copy of the record. Returns False if it was dropped."""
        with self._order_lock:
            if self.cancelled:
                return False
            if self.last_version is not None and game.version <= self.last_version:
                logger.debug(
                    "Dropped version %d for game %s, already at %d",
                    game.version,
                    self.game_id,
                    self.last_version,
                )
                return False
            self.last_version = game.version
            self._queue.put(deepcopy(game))
            return True

    def get(self, timeout: Optional[float] = None) -> Optional[GameModel]:
        """Next record, or None if cancelled or nothing arrived within timeout."""
        if self.cancelled:
            return None
        try:
            item = self._queue.get(timeout=timeout)
        except queue.Empty:
            return None
        if item is _CANCELLED:
            return None
        return item  # type: ignore[return-value]

    def cancel(self) -> None:
        if self.cancelled:
            return
        self._cancelled.set()
        self._feed.unsubscribe(self)
        self._queue.put(_CANCELLED)

    def __iter__(self) -> Iterator[GameModel]:
        while not self.cancelled:
            item = self._queue.get()
            if item is _CANCELLED or self.cancelled:
                return
            yield item  # type: ignore[misc]

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.cancel()


class GameFeed:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._subs: dict[UUID, list[Subscription]] = {}

    def subscribe(self, game_id: UUID) -> Subscription:
        subscription = Subscription(self, game_id)
        with self._lock:
            self._subs.setdefault(game_id, []).append(subscription)
        logger.debug("New subscriber for game %s", game_id)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            subs = self._subs.get(subscription.game_id, [])
            self._subs[subscription.game_id] = [s for s in subs if s is not subscription]
            if not self._subs[subscription.game_id]:
                self._subs.pop(subscription.game_id, None)

    def publish(self, game_id: UUID, game: GameModel) -> None:
        with self._lock:
            subs = list(self._subs.get(game_id, []))
        for subscription in subs:
            subscription.deliver(game)

    def subscriber_count(self, game_id: UUID) -> int:
        with self._lock:
            return len(self._subs.get(game_id, []))

    def close(self, game_id: UUID) -> None:
        """Cancel every subscription to a game, e.g. once its record is gone."""
        with self._lock:
            subs = self._subs.pop(game_id, [])
        for subscription in subs:
            subscription.cancel()
        if subs:
            logger.debug("Closed %d subscription(s) for game %s", len(subs), game_id)

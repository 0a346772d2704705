"""
Application Layer: Favorites Store
One instance per running application, created in the composition root.
"""
import threading
from typing import Callable, FrozenSet
import structlog

from coinwatch.application.ports import IKeyValueStorage
from coinwatch.application.state import StateHolder

logger = structlog.get_logger()

FAVORITES_KEY = "fav_ids"

class FavoritesStore:
    """
    Set of favorite coin ids persisted to key-value storage.
    Toggles are serialized: read, flip, persist, publish.
    """

    def __init__(self, storage: IKeyValueStorage) -> None:
        self._storage = storage
        self._state: StateHolder[FrozenSet[str]] = StateHolder(frozenset())
        self._current: FrozenSet[str] = frozenset()
        self._lock = threading.Lock()
        # reentrant: subscribers may call back into the store
        self._publish_lock = threading.RLock()

    @property
    def favorites(self) -> FrozenSet[str]:
        return self._current

    def load(self) -> FrozenSet[str]:
        """Reads the persisted set (empty if none). Safe on every screen mount."""
        with self._lock:
            loaded = frozenset(self._storage.get_string_set(FAVORITES_KEY))
            self._current = loaded
        self._publish()
        logger.debug("favorites_loaded", count=len(loaded))
        return loaded

    def toggle(self, coin_id: str) -> bool:
        """
        Flips membership of coin_id and persists before returning.
        Returns the new membership. On FavoritesStorageError the
        in-memory set is left untouched.
        """
        with self._lock:
            current = set(self._current)
            if coin_id in current:
                current.discard(coin_id)
            else:
                current.add(coin_id)
            updated = frozenset(current)
            self._storage.put_string_set(FAVORITES_KEY, updated)
            self._current = updated
        self._publish()

        is_favorite = coin_id in updated
        logger.info("favorite_toggled", coin_id=coin_id, favorite=is_favorite)
        return is_favorite

    def is_favorite(self, coin_id: str) -> bool:
        return coin_id in self._current

    def _publish(self) -> None:
        """Notifies subscribers outside the write lock, always with the latest set"""
        with self._publish_lock:
            self._state.set(self._current)

    def subscribe(self, callback: Callable[[FrozenSet[str]], None]) -> Callable[[], None]:
        return self._state.subscribe(callback)

    def close(self) -> None:
        """Teardown: drops subscribers. The persisted set is kept."""
        self._state.clear_subscribers()

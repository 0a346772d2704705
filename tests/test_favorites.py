"""
Tests for the favorites store and its JSON preferences backend
"""
import json
import threading

import pytest

from coinwatch.application.favorites import FAVORITES_KEY, FavoritesStore
from coinwatch.domain import FavoritesStorageError
from coinwatch.infrastructure.repo import JsonPreferences


@pytest.fixture
def prefs_path(tmp_path):
    return tmp_path / "prefs" / "favorites.json"


@pytest.fixture
def store(prefs_path):
    store = FavoritesStore(JsonPreferences(prefs_path))
    yield store
    store.close()


def test_fresh_store_has_no_favorites(store):
    assert store.load() == frozenset()
    assert store.is_favorite("bitcoin") is False
    assert store.is_favorite("") is False


def test_toggle_is_self_inverse(store):
    store.load()
    store.toggle("ethereum")
    before = store.favorites

    assert store.toggle("bitcoin") is True
    assert store.toggle("bitcoin") is False

    assert store.favorites == before


def test_toggle_persists_before_returning(store, prefs_path):
    store.load()
    store.toggle("bitcoin")
    store.toggle("dogecoin")

    on_disk = json.loads(prefs_path.read_text(encoding="utf-8"))
    assert on_disk == {FAVORITES_KEY: ["bitcoin", "dogecoin"]}

    reopened = FavoritesStore(JsonPreferences(prefs_path))
    assert reopened.load() == {"bitcoin", "dogecoin"}
    assert reopened.is_favorite("dogecoin")


def test_load_is_idempotent(store):
    store.load()
    store.toggle("solana")

    assert store.load() == {"solana"}
    assert store.load() == {"solana"}


def test_subscribers_see_every_change_until_unsubscribed(store):
    seen = []
    unsubscribe = store.subscribe(seen.append)

    store.load()
    store.toggle("bitcoin")
    unsubscribe()
    store.toggle("bitcoin")

    assert seen == [frozenset(), frozenset({"bitcoin"})]


def test_close_drops_subscribers(store):
    seen = []
    store.subscribe(seen.append)
    store.close()

    store.toggle("bitcoin")

    assert seen == []
    assert store.is_favorite("bitcoin")


def test_concurrent_toggles_do_not_lose_updates(store):
    store.load()
    ids = [f"coin-{n}" for n in range(40)]
    threads = [threading.Thread(target=store.toggle, args=(coin_id,)) for coin_id in ids]

    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert store.favorites == frozenset(ids)
    assert FavoritesStore(JsonPreferences(store._storage.path)).load() == frozenset(ids)


class FailingStorage:
    def get_string_set(self, key):
        return frozenset({"bitcoin"})

    def put_string_set(self, key, values):
        raise FavoritesStorageError("disk full")


def test_failed_write_propagates_and_keeps_memory_unchanged():
    store = FavoritesStore(FailingStorage())
    store.load()

    with pytest.raises(FavoritesStorageError):
        store.toggle("ethereum")

    assert store.favorites == {"bitcoin"}


# --- JsonPreferences ---

def test_preferences_missing_file_reads_empty(prefs_path):
    assert JsonPreferences(prefs_path).get_string_set(FAVORITES_KEY) == frozenset()


def test_preferences_corrupt_file_reads_empty(prefs_path):
    prefs_path.parent.mkdir(parents=True)
    prefs_path.write_text("{not json", encoding="utf-8")

    assert JsonPreferences(prefs_path).get_string_set(FAVORITES_KEY) == frozenset()


def test_preferences_keep_other_keys(prefs_path):
    prefs = JsonPreferences(prefs_path)
    prefs.put_string_set("theme", ["dark"])
    prefs.put_string_set(FAVORITES_KEY, {"bitcoin"})

    assert prefs.get_string_set("theme") == {"dark"}
    assert prefs.get_string_set(FAVORITES_KEY) == {"bitcoin"}


def test_preferences_write_failure_raises_storage_error(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("", encoding="utf-8")
    prefs = JsonPreferences(blocker / "favorites.json")

    with pytest.raises(FavoritesStorageError):
        prefs.put_string_set(FAVORITES_KEY, {"bitcoin"})


def test_subscriber_may_toggle_from_its_callback(store):
    store.load()

    def follow_bitcoin(favorites):
        if "bitcoin" in favorites and "wrapped-bitcoin" not in favorites:
            store.toggle("wrapped-bitcoin")

    store.subscribe(follow_bitcoin)
    worker = threading.Thread(target=store.toggle, args=("bitcoin",), daemon=True)
    worker.start()
    worker.join(timeout=2)

    assert not worker.is_alive()
    assert store.favorites == {"bitcoin", "wrapped-bitcoin"}
    assert FavoritesStore(JsonPreferences(store._storage.path)).load() == {"bitcoin", "wrapped-bitcoin"}

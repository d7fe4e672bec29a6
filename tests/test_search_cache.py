import pytest

from services.search_cache import CachedSearch, Debouncer, TTLCache, make_key


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def test_make_key_normalises_values():
    assert make_key({"q": "Food ", "type": None}) == make_key({"q": "food"})
    assert make_key({"tags": ["b", "a"]}) == make_key({"tags": ("a", "b")})
    assert make_key({"q": "a", "page": 1}) != make_key({"q": "a", "page": 2})


def test_ttl_cache_expiry():
    clock = FakeClock()
    cache = TTLCache(ttl=10, clock=clock)
    cache.set("k", [1])
    clock.now = 5
    assert cache.get("k") == [1]
    clock.now = 11
    assert cache.get("k") is None
    assert cache.get("k", allow_stale=True) == [1]
    cache.invalidate("k")
    assert len(cache) == 0


def test_debouncer_waits_for_input_to_settle():
    clock = FakeClock()
    debouncer = Debouncer(wait=0.3, clock=clock)
    assert debouncer.submit("search", "gr")
    assert not debouncer.ready("search")
    clock.now = 0.2
    assert debouncer.submit("search", "green")
    clock.now = 0.4
    assert not debouncer.ready("search")
    clock.now = 0.6
    assert debouncer.ready("search")
    assert not debouncer.submit("search", "green")
    assert debouncer.value("search") == "green"


def test_cached_search_hits_cache_until_ttl():
    clock = FakeClock()
    calls = []

    def fetch(force_refresh=False, **params):
        calls.append(params)
        return [params["q"]]

    search = CachedSearch(fetch, ttl=30, clock=clock)
    assert search(q="food") == ["food"]
    assert search(q="Food") == ["food"]
    assert search.last_from_cache
    assert len(calls) == 1

    search(force_refresh=True, q="food")
    assert len(calls) == 2
    clock.now = 31
    search(q="food")
    assert len(calls) == 3


def test_cached_search_serves_stale_results_on_error():
    clock = FakeClock()
    responses = [["ok"], RuntimeError("backend down")]

    def fetch(force_refresh=False, **params):
        item = responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    search = CachedSearch(fetch, ttl=1, clock=clock)
    search(q="x")
    clock.now = 5
    assert search(q="x") == ["ok"]
    assert isinstance(search.last_error, RuntimeError)
    assert search.last_from_cache


def test_cached_search_raises_without_cached_value():
    def fetch(force_refresh=False, **params):
        raise RuntimeError("down")

    with pytest.raises(RuntimeError):
        CachedSearch(fetch, ttl=1)(q="x")


def test_ttl_cache_purges_entries_past_stale_window():
    clock = FakeClock()
    cache = TTLCache(ttl=1, clock=clock, max_size=5000, stale_for=10)
    for i in range(1000):
        cache.set(i, [i])
    clock.now = 5
    assert cache.get(3, allow_stale=True) == [3]
    clock.now = 100
    cache.set("fresh", [])
    assert len(cache) == 1
    assert cache.get(3, allow_stale=True) is None


def test_ttl_cache_evicts_oldest_when_full():
    clock = FakeClock()
    cache = TTLCache(ttl=60, clock=clock, max_size=10)
    for i in range(10):
        clock.now = i
        cache.set(i, [i])
    clock.now = 10
    cache.set("new", [])
    assert len(cache) == 10
    assert 0 not in cache
    assert 1 in cache and "new" in cache


def test_ttl_cache_overwrite_does_not_evict():
    cache = TTLCache(ttl=60, clock=FakeClock(), max_size=2)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.set("b", 3)
    assert cache.get("a") == 1
    assert cache.get("b") == 3


def test_debouncer_remaining():
    clock = FakeClock()
    debouncer = Debouncer(wait=0.3, clock=clock)
    assert debouncer.remaining("search") == 0.0
    debouncer.submit("search", "g")
    clock.now = 0.1
    assert debouncer.remaining("search") == pytest.approx(0.2)
    clock.now = 1
    assert debouncer.remaining("search") == 0.0

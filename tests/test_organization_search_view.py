from unittest.mock import MagicMock, patch

from services.search_cache import CachedSearch, Debouncer


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def _search_due():
    with patch.dict("sys.modules", {"streamlit": MagicMock()}):
        from views.organizations import search_due
    return search_due


def test_typing_burst_fetches_once():
    search_due = _search_due()
    clock = FakeClock()
    debouncer = Debouncer(wait=0.3, clock=clock)
    calls = []

    def fetch(force_refresh=False, **params):
        calls.append(params["name"])
        return [params["name"]]

    search = CachedSearch(fetch, ttl=60, clock=clock)
    for t, typed in [(0.0, "g"), (0.1, "gr"), (0.2, "gre"), (0.25, "green")]:
        clock.now = t
        due, changed = search_due(debouncer, typed)
        assert changed and not due
    # further reruns after the input settles reuse the cached result
    for t in (0.6, 0.7, 1.0):
        clock.now = t
        due, changed = search_due(debouncer, "green")
        assert due and not changed
        assert search(name="green") == ["green"]
    assert calls == ["green"]


def test_first_render_and_refresh_search_immediately():
    search_due = _search_due()
    debouncer = Debouncer(wait=0.3, clock=FakeClock())
    assert search_due(debouncer, "", have_results=False) == (True, True)
    assert search_due(debouncer, "food", force=True) == (True, True)
    assert search_due(debouncer, "foods") == (False, True)

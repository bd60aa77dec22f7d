"""Shared fixtures: history stores on temporary storage and a Flask client.

Stores get a ticking clock so every entry has a strictly later timestamp
than the one before it, unless the clock is frozen.
"""

from datetime import datetime, timedelta, timezone

import pytest

from mortgage_calc_web.app import create_app
from mortgage_calc_web.history_store import JsonHistoryStore, SqlHistoryStore


class TickingClock:
    def __init__(self, start=datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)):
        self.current = start
        self.frozen = False

    def __call__(self) -> datetime:
        if not self.frozen:
            self.current += timedelta(seconds=1)
        return self.current


@pytest.fixture
def clock():
    return TickingClock()


@pytest.fixture
def json_store(tmp_path, clock):
    return JsonHistoryStore(tmp_path / "history.json", clock=clock)


@pytest.fixture
def sql_store(tmp_path, clock):
    return SqlHistoryStore(f"sqlite:///{tmp_path / 'history.sqlite3'}", clock=clock)


@pytest.fixture(params=["json", "sql"])
def store(request):
    """Each backend in turn; both honour the same contract."""
    return request.getfixturevalue(f"{request.param}_store")


@pytest.fixture
def client(json_store):
    app = create_app(store=json_store)
    app.config["TESTING"] = True
    return app.test_client()

"""Tests for the document store backends."""

from unittest.mock import MagicMock

import pytest

from reprover_api.services import workout_store
from reprover_api.services.workout_store import (
    InMemoryWorkoutStore,
    StoreConfigurationError,
    StoreError,
    SupabaseWorkoutStore,
    get_workout_store,
    timestamp_sort_key,
)


def _log(timestamp, name="Session"):
    return {"timestamp": timestamp, "plan": [], "actuals": [], "workoutName": name}


class TestTimestampSortKey:

    def test_zulu_and_offset_compare_equal(self):
        assert timestamp_sort_key("2024-05-01T10:00:00Z") == timestamp_sort_key("2024-05-01T10:00:00+00:00")

    def test_naive_treated_as_utc(self):
        assert timestamp_sort_key("2024-05-01T10:00:00") == timestamp_sort_key("2024-05-01T10:00:00Z")

    def test_invalid_sorts_first(self):
        assert timestamp_sort_key("garbage") < timestamp_sort_key("1970-01-01T00:00:00Z")
        assert timestamp_sort_key(None) < timestamp_sort_key("1970-01-01T00:00:00Z")


class TestInMemoryWorkoutStore:

    def test_logs_newest_first_and_paged(self):
        store = InMemoryWorkoutStore()
        for day in (3, 1, 2):
            store.add_log("u1", _log(f"2024-05-0{day}T00:00:00Z", f"Day {day}"))

        page = store.list_logs("u1", limit=2)

        assert [log["workoutName"] for log in page] == ["Day 3", "Day 2"]
        assert [log["workoutName"] for log in store.list_logs("u1", limit=2, offset=2)] == ["Day 1"]

    def test_stored_log_is_a_copy(self):
        store = InMemoryWorkoutStore()
        log = _log("2024-05-01T00:00:00Z")
        store.add_log("u1", log)

        log["workoutName"] = "changed"
        [stored] = store.iter_logs("u1")
        stored["workoutName"] = "changed again"

        assert store.iter_logs("u1")[0]["workoutName"] == "Session"

    def test_saved_workout_lifecycle(self):
        store = InMemoryWorkoutStore()
        saved = store.add_saved_workout("u1", "Legs", [{"rounds": 1, "exercises": []}])

        assert store.get_saved_workout("u1", saved["id"])["name"] == "Legs"
        assert store.get_saved_workout("u2", saved["id"]) is None

        updated = store.update_saved_workout("u1", saved["id"], name="Leg Day")
        assert updated["name"] == "Leg Day"
        assert updated["workout"] == saved["workout"]
        assert store.update_saved_workout("u2", saved["id"], name="Nope") is None

        assert store.delete_saved_workout("u2", saved["id"]) is False
        assert store.delete_saved_workout("u1", saved["id"]) is True
        assert store.list_saved_workouts("u1") == []


class TestSupabaseWorkoutStore:
    """Query construction against a mocked Supabase client."""

    @pytest.fixture
    def supabase(self):
        client = MagicMock()
        table = client.table.return_value
        # Builder methods return the same mock so chains resolve to one .execute()
        for method in ("select", "insert", "update", "delete", "eq", "order", "range", "limit"):
            getattr(table, method).return_value = table
        return client

    def test_add_log(self, supabase):
        table = supabase.table.return_value
        table.execute.return_value = MagicMock(data=[{"id": 42}])
        store = SupabaseWorkoutStore(supabase)

        log_id = store.add_log("u1", _log("2024-05-01T00:00:00Z"))

        assert log_id == "42"
        supabase.table.assert_called_with("logs")
        row = table.insert.call_args.args[0]
        assert row["user_id"] == "u1"
        assert row["timestamp"] == "2024-05-01T00:00:00Z"
        assert row["document"]["workoutName"] == "Session"

    def test_list_logs_pages_by_range(self, supabase):
        table = supabase.table.return_value
        table.execute.return_value = MagicMock(data=[
            {"id": 7, "created_at": "2024-05-02T00:00:00Z", "document": _log("2024-05-02T00:00:00Z")},
        ])
        store = SupabaseWorkoutStore(supabase)

        logs = store.list_logs("u1", limit=10, offset=20)

        table.eq.assert_called_with("user_id", "u1")
        table.order.assert_called_with("timestamp", desc=True)
        table.range.assert_called_with(20, 29)
        assert logs[0]["id"] == "7"
        assert logs[0]["createdAt"] == "2024-05-02T00:00:00Z"

    def test_iter_logs_reads_every_page(self, supabase, monkeypatch):
        monkeypatch.setattr(workout_store, "ITER_PAGE_SIZE", 2)
        rows = [
            {"id": i, "created_at": "2024-05-01T00:00:00Z", "document": _log(f"2024-05-0{9 - i}T00:00:00Z")}
            for i in range(5)
        ]
        table = supabase.table.return_value
        table.execute.side_effect = [
            MagicMock(data=rows[0:2]),
            MagicMock(data=rows[2:4]),
            MagicMock(data=rows[4:5]),
        ]
        store = SupabaseWorkoutStore(supabase)

        logs = store.iter_logs("u1")

        assert [log["id"] for log in logs] == ["0", "1", "2", "3", "4"]
        assert [c.args for c in table.range.call_args_list] == [(0, 1), (2, 3), (4, 5)]

    def test_iter_logs_stops_on_empty_page(self, supabase, monkeypatch):
        monkeypatch.setattr(workout_store, "ITER_PAGE_SIZE", 2)
        table = supabase.table.return_value
        table.execute.side_effect = [
            MagicMock(data=[{"id": 1, "document": _log("2024-05-02T00:00:00Z")}, {"id": 2, "document": _log("2024-05-01T00:00:00Z")}]),
            MagicMock(data=[]),
        ]
        store = SupabaseWorkoutStore(supabase)

        assert len(store.iter_logs("u1")) == 2
        assert table.execute.call_count == 2

    def test_get_missing_saved_workout(self, supabase):
        supabase.table.return_value.execute.return_value = MagicMock(data=[])
        store = SupabaseWorkoutStore(supabase)

        assert store.get_saved_workout("u1", "abc") is None
        supabase.table.assert_called_with("savedWorkouts")

    def test_delete_reports_missing_rows(self, supabase):
        supabase.table.return_value.execute.return_value = MagicMock(data=[])
        store = SupabaseWorkoutStore(supabase)

        assert store.delete_saved_workout("u1", "abc") is False

    def test_client_errors_become_store_errors(self, supabase):
        supabase.table.return_value.execute.side_effect = Exception("connection refused")
        store = SupabaseWorkoutStore(supabase)

        with pytest.raises(StoreError):
            store.list_saved_workouts("u1")


class TestGetWorkoutStore:

    @pytest.fixture(autouse=True)
    def reset_store(self, monkeypatch):
        monkeypatch.setattr(workout_store, "_store", None)

    def test_memory_backend(self, monkeypatch):
        monkeypatch.setattr(workout_store.settings, "STORE_BACKEND", "memory")

        store = get_workout_store()

        assert isinstance(store, InMemoryWorkoutStore)
        assert get_workout_store() is store

    def test_supabase_without_credentials(self, monkeypatch):
        monkeypatch.setattr(workout_store.settings, "STORE_BACKEND", "supabase")
        monkeypatch.setattr(workout_store.settings, "SUPABASE_URL", None)
        monkeypatch.setattr(workout_store.settings, "SUPABASE_KEY", None)

        with pytest.raises(StoreConfigurationError):
            get_workout_store()

    def test_misconfigured_store_returns_500(self, monkeypatch, anonymous_client):
        from reprover_api.auth import get_current_user
        from reprover_api.main import app

        monkeypatch.setattr(workout_store.settings, "STORE_BACKEND", "supabase")
        monkeypatch.setattr(workout_store.settings, "SUPABASE_URL", None)
        app.dependency_overrides.pop(get_workout_store, None)
        app.dependency_overrides[get_current_user] = lambda: "u1"

        response = anonymous_client.get("/api/saved-workouts")

        assert response.status_code == 500
        assert response.json() == {"error": "Document store unavailable"}

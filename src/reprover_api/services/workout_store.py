"""
Document store for workout logs and saved workouts.

Two collections, both scoped by user id:
- ``logs``: completed sessions, written once and never modified
- ``savedWorkouts``: named plans with a create/update/delete lifecycle

The Supabase backend keeps each document in a JSON column next to the
columns it is filtered and ordered by. The in-memory backend is for local
development and tests.
"""

import logging
import threading
import uuid
from abc import ABC, abstractmethod
from copy import deepcopy
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from reprover_api.config import settings

logger = logging.getLogger(__name__)

LOGS_COLLECTION = "logs"
SAVED_WORKOUTS_COLLECTION = "savedWorkouts"

ITER_PAGE_SIZE = 1000


class StoreError(RuntimeError):
    """Raised when a document store call fails."""


class StoreConfigurationError(StoreError):
    """Raised when the configured store backend cannot be reached or built."""


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def timestamp_sort_key(value: Optional[str]) -> datetime:
    """Parse an ISO-8601 string for ordering; naive values count as UTC."""
    if not value:
        return datetime.min.replace(tzinfo=timezone.utc)
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return datetime.min.replace(tzinfo=timezone.utc)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class WorkoutStore(ABC):
    """Collection-level operations the API handlers need."""

    @abstractmethod
    def add_log(self, user_id: str, log: Dict[str, Any]) -> str:
        """Persist a workout log document and return its id."""

    @abstractmethod
    def list_logs(self, user_id: str, limit: int, offset: int = 0) -> List[Dict[str, Any]]:
        """Return one page of the user's logs, newest timestamp first."""

    @abstractmethod
    def iter_logs(self, user_id: str) -> List[Dict[str, Any]]:
        """Return all of the user's logs, newest timestamp first."""

    @abstractmethod
    def list_saved_workouts(self, user_id: str) -> List[Dict[str, Any]]:
        """Return the user's saved workouts, newest first."""

    @abstractmethod
    def get_saved_workout(self, user_id: str, workout_id: str) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    def add_saved_workout(self, user_id: str, name: str, workout: List[Dict[str, Any]]) -> Dict[str, Any]:
        ...

    @abstractmethod
    def update_saved_workout(
        self,
        user_id: str,
        workout_id: str,
        name: Optional[str] = None,
        workout: Optional[List[Dict[str, Any]]] = None,
    ) -> Optional[Dict[str, Any]]:
        """Apply the given changes and bump updatedAt. None if not found."""

    @abstractmethod
    def delete_saved_workout(self, user_id: str, workout_id: str) -> bool:
        """Delete a saved workout. Returns False if it did not exist."""


# ---------------------------------------------------------------------------
# In-memory backend
# ---------------------------------------------------------------------------


class InMemoryWorkoutStore(WorkoutStore):
    """Process-local store. Contents are lost on restart."""

    def __init__(self):
        self._lock = threading.Lock()
        self._logs: Dict[str, Dict[str, Any]] = {}
        self._saved: Dict[str, Dict[str, Any]] = {}

    def add_log(self, user_id: str, log: Dict[str, Any]) -> str:
        log_id = uuid.uuid4().hex
        document = deepcopy(log)
        document.update({"id": log_id, "userId": user_id, "createdAt": utc_now_iso()})
        with self._lock:
            self._logs[log_id] = document
        return log_id

    def _user_logs(self, user_id: str) -> List[Dict[str, Any]]:
        with self._lock:
            logs = [deepcopy(doc) for doc in reversed(self._logs.values()) if doc["userId"] == user_id]
        logs.sort(key=lambda doc: timestamp_sort_key(doc.get("timestamp")), reverse=True)
        return logs

    def list_logs(self, user_id: str, limit: int, offset: int = 0) -> List[Dict[str, Any]]:
        return self._user_logs(user_id)[offset:offset + limit]

    def iter_logs(self, user_id: str) -> List[Dict[str, Any]]:
        return self._user_logs(user_id)

    def list_saved_workouts(self, user_id: str) -> List[Dict[str, Any]]:
        with self._lock:
            workouts = [deepcopy(doc) for doc in reversed(self._saved.values()) if doc["userId"] == user_id]
        workouts.sort(key=lambda doc: timestamp_sort_key(doc.get("createdAt")), reverse=True)
        return workouts

    def get_saved_workout(self, user_id: str, workout_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            doc = self._saved.get(workout_id)
            if doc is None or doc["userId"] != user_id:
                return None
            return deepcopy(doc)

    def add_saved_workout(self, user_id: str, name: str, workout: List[Dict[str, Any]]) -> Dict[str, Any]:
        now = utc_now_iso()
        doc = {
            "id": uuid.uuid4().hex,
            "userId": user_id,
            "name": name,
            "workout": deepcopy(workout),
            "createdAt": now,
            "updatedAt": now,
        }
        with self._lock:
            self._saved[doc["id"]] = doc
        return deepcopy(doc)

    def update_saved_workout(
        self,
        user_id: str,
        workout_id: str,
        name: Optional[str] = None,
        workout: Optional[List[Dict[str, Any]]] = None,
    ) -> Optional[Dict[str, Any]]:
        with self._lock:
            doc = self._saved.get(workout_id)
            if doc is None or doc["userId"] != user_id:
                return None
            if name is not None:
                doc["name"] = name
            if workout is not None:
                doc["workout"] = deepcopy(workout)
            doc["updatedAt"] = utc_now_iso()
            return deepcopy(doc)

    def delete_saved_workout(self, user_id: str, workout_id: str) -> bool:
        with self._lock:
            doc = self._saved.get(workout_id)
            if doc is None or doc["userId"] != user_id:
                return False
            del self._saved[workout_id]
            return True


# ---------------------------------------------------------------------------
# Supabase backend
# ---------------------------------------------------------------------------


def get_supabase_client():
    """Build a Supabase client from settings.

    Raises:
        StoreConfigurationError: If the library or credentials are missing
    """
    try:
        from supabase import create_client
    except ImportError as e:
        raise StoreConfigurationError("Supabase library not installed. Run: pip install supabase") from e

    if not settings.SUPABASE_URL or not settings.SUPABASE_KEY:
        raise StoreConfigurationError(
            "Supabase credentials not configured. Set SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY."
        )

    try:
        return create_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)
    except Exception as e:
        logger.error(f"Failed to create Supabase client: {e}")
        raise StoreConfigurationError(f"Failed to create Supabase client: {e}") from e


def _log_from_row(row: Dict[str, Any]) -> Dict[str, Any]:
    document = dict(row.get("document") or {})
    document["id"] = str(row["id"])
    document.setdefault("createdAt", row.get("created_at"))
    return document


def _saved_workout_from_row(row: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": str(row["id"]),
        "userId": row.get("user_id"),
        "name": row["name"],
        "workout": row.get("workout") or [],
        "createdAt": row.get("created_at"),
        "updatedAt": row.get("updated_at"),
    }


class SupabaseWorkoutStore(WorkoutStore):
    """Store backed by two Supabase tables named after the collections."""

    def __init__(self, client=None):
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = get_supabase_client()
        return self._client

    def _execute(self, action: str, query):
        try:
            return query.execute()
        except Exception as e:
            logger.error(f"Supabase {action} failed: {e}")
            raise StoreError(f"Failed to {action}") from e

    def add_log(self, user_id: str, log: Dict[str, Any]) -> str:
        now = utc_now_iso()
        row = {
            "user_id": user_id,
            "timestamp": log["timestamp"],
            "created_at": now,
            "document": {**log, "createdAt": now},
        }
        result = self._execute("save workout log", self.client.table(LOGS_COLLECTION).insert(row))
        if not result.data:
            raise StoreError("Failed to save workout log")
        log_id = str(result.data[0]["id"])
        logger.info(f"Workout log saved: {log_id}")
        return log_id

    def list_logs(self, user_id: str, limit: int, offset: int = 0) -> List[Dict[str, Any]]:
        query = (
            self.client.table(LOGS_COLLECTION)
            .select("id, document, created_at")
            .eq("user_id", user_id)
            .order("timestamp", desc=True)
            .range(offset, offset + limit - 1)
        )
        result = self._execute("list workout logs", query)
        return [_log_from_row(row) for row in result.data or []]

    def iter_logs(self, user_id: str) -> List[Dict[str, Any]]:
        # PostgREST returns at most 1000 rows per request by default
        logs: List[Dict[str, Any]] = []
        offset = 0
        while True:
            page = self.list_logs(user_id, ITER_PAGE_SIZE, offset)
            logs.extend(page)
            if len(page) < ITER_PAGE_SIZE:
                return logs
            offset += ITER_PAGE_SIZE

    def list_saved_workouts(self, user_id: str) -> List[Dict[str, Any]]:
        query = (
            self.client.table(SAVED_WORKOUTS_COLLECTION)
            .select("*")
            .eq("user_id", user_id)
            .order("created_at", desc=True)
        )
        result = self._execute("list saved workouts", query)
        return [_saved_workout_from_row(row) for row in result.data or []]

    def get_saved_workout(self, user_id: str, workout_id: str) -> Optional[Dict[str, Any]]:
        query = (
            self.client.table(SAVED_WORKOUTS_COLLECTION)
            .select("*")
            .eq("id", workout_id)
            .eq("user_id", user_id)
            .limit(1)
        )
        result = self._execute("read saved workout", query)
        if not result.data:
            return None
        return _saved_workout_from_row(result.data[0])

    def add_saved_workout(self, user_id: str, name: str, workout: List[Dict[str, Any]]) -> Dict[str, Any]:
        now = utc_now_iso()
        row = {
            "user_id": user_id,
            "name": name,
            "workout": workout,
            "created_at": now,
            "updated_at": now,
        }
        result = self._execute("save workout", self.client.table(SAVED_WORKOUTS_COLLECTION).insert(row))
        if not result.data:
            raise StoreError("Failed to save workout")
        return _saved_workout_from_row(result.data[0])

    def update_saved_workout(
        self,
        user_id: str,
        workout_id: str,
        name: Optional[str] = None,
        workout: Optional[List[Dict[str, Any]]] = None,
    ) -> Optional[Dict[str, Any]]:
        changes: Dict[str, Any] = {"updated_at": utc_now_iso()}
        if name is not None:
            changes["name"] = name
        if workout is not None:
            changes["workout"] = workout

        query = (
            self.client.table(SAVED_WORKOUTS_COLLECTION)
            .update(changes)
            .eq("id", workout_id)
            .eq("user_id", user_id)
        )
        result = self._execute("update saved workout", query)
        if not result.data:
            return None
        return _saved_workout_from_row(result.data[0])

    def delete_saved_workout(self, user_id: str, workout_id: str) -> bool:
        query = (
            self.client.table(SAVED_WORKOUTS_COLLECTION)
            .delete()
            .eq("id", workout_id)
            .eq("user_id", user_id)
        )
        result = self._execute("delete saved workout", query)
        return bool(result.data)


# ---------------------------------------------------------------------------
# FastAPI dependency
# ---------------------------------------------------------------------------

_store: Optional[WorkoutStore] = None


def get_workout_store() -> WorkoutStore:
    """Return the process-wide store for the configured backend."""
    global _store
    if _store is None:
        if settings.STORE_BACKEND == "memory":
            logger.warning("Using in-memory workout store; data will not survive a restart")
            _store = InMemoryWorkoutStore()
        else:
            _store = SupabaseWorkoutStore(get_supabase_client())
    return _store

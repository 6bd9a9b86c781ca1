"""
store.py – Document store used by the moderation modules.

Every moderation entity lives in its own collection of dicts keyed by "id".
The store offers insert, point-read, equality query (with optional ordering and
limit) and field update, plus keyed in-process locks so callers can make a
check-then-act sequence atomic.
"""

import copy
import json
import logging
import os
import shutil
import tempfile
import threading
from contextlib import contextmanager
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from toilet_moderation.errors import PersistenceFailure

logger = logging.getLogger(__name__)

# Collection names
REPORTS = "reports"
VIOLATIONS = "violation_records"
RESTRICTIONS = "user_restrictions"
TOILETS = "toilets"
REVIEWS = "reviews"
COMMENTS = "comments"


# ────────────────────────────────
# Query helpers
# ────────────────────────────────
def _matches(doc: dict, where: Optional[Dict[str, Any]]) -> bool:
    if not where:
        return True
    for field, expected in where.items():
        value = doc.get(field)
        if isinstance(expected, (list, tuple, set, frozenset)):
            if value not in expected:
                return False
        elif value != expected:
            return False
    return True


def _select(
    docs: Iterable[dict],
    where: Optional[Dict[str, Any]],
    order_by: Optional[str],
    descending: bool,
    limit: Optional[int],
) -> List[dict]:
    result = [d for d in docs if _matches(d, where)]
    if order_by:
        # Missing values sort first ascending, last descending
        result.sort(key=lambda d: (d.get(order_by) is not None, d.get(order_by)), reverse=descending)
    if limit is not None:
        result = result[:limit]
    return result


class DocumentStore:
    """Base class holding the keyed lock registry shared by all backends."""

    def __init__(self):
        # key -> [lock, number of holders and waiters]
        self._locks: Dict[tuple, list] = {}
        self._locks_guard = threading.Lock()

    @contextmanager
    def lock(self, *key):
        """Serialize every block that uses the same key."""
        with self._locks_guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = self._locks[key] = [threading.RLock(), 0]
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._locks_guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[key]

    def insert(self, collection: str, doc: dict) -> dict:
        raise NotImplementedError

    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        raise NotImplementedError

    def query(
        self,
        collection: str,
        where: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[dict]:
        raise NotImplementedError

    def update(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> Optional[dict]:
        raise NotImplementedError


class MemoryStore(DocumentStore):
    """Dict-backed store. Documents are copied in and out."""

    def __init__(self):
        super().__init__()
        self._collections: Dict[str, Dict[str, dict]] = {}
        self._data_lock = threading.RLock()

    def insert(self, collection: str, doc: dict) -> dict:
        if "id" not in doc:
            raise PersistenceFailure(f"Document for '{collection}' has no id.")
        with self._data_lock:
            self._collections.setdefault(collection, {})[doc["id"]] = copy.deepcopy(doc)
        return copy.deepcopy(doc)

    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        with self._data_lock:
            doc = self._collections.get(collection, {}).get(doc_id)
            return copy.deepcopy(doc) if doc is not None else None

    def query(self, collection, where=None, order_by=None, descending=False, limit=None):
        with self._data_lock:
            docs = list(self._collections.get(collection, {}).values())
            return copy.deepcopy(_select(docs, where, order_by, descending, limit))

    def update(self, collection, doc_id, fields):
        with self._data_lock:
            doc = self._collections.get(collection, {}).get(doc_id)
            if doc is None:
                return None
            doc.update(copy.deepcopy(fields))
            return copy.deepcopy(doc)


# ────────────────────────────────
# JSON file backend
# ────────────────────────────────
def _encode(value: Any):
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class JsonFileStore(DocumentStore):
    """One JSON file per collection under `data_dir`, written atomically."""

    def __init__(self, data_dir: str):
        super().__init__()
        self.data_dir = data_dir
        self._file_locks: Dict[str, threading.RLock] = {}
        self._file_locks_guard = threading.Lock()

    def _path(self, collection: str) -> str:
        return os.path.join(self.data_dir, f"{collection}.json")

    def _file_lock(self, collection: str) -> threading.RLock:
        with self._file_locks_guard:
            return self._file_locks.setdefault(collection, threading.RLock())

    def _load(self, collection: str) -> List[dict]:
        path = self._path(collection)
        if not os.path.exists(path):
            return []
        try:
            with open(path, "r", encoding="utf-8") as f:
                content = f.read().strip()
        except OSError as e:
            raise PersistenceFailure(f"Could not read {path}.", e) from e
        if not content:
            return []
        try:
            return json.loads(content)
        except json.JSONDecodeError as e:
            logger.error("Corrupted data file %s", path)
            raise PersistenceFailure(f"Corrupted data file {path}.", e) from e

    def _save(self, collection: str, data: List[dict]) -> None:
        path = self._path(collection)
        try:
            os.makedirs(self.data_dir, exist_ok=True)
            tmp_fd, tmp_path = tempfile.mkstemp(dir=self.data_dir)
            os.close(tmp_fd)
            try:
                with open(tmp_path, "w", encoding="utf-8") as f:
                    json.dump(data, f, indent=2, default=_encode)
                shutil.move(tmp_path, path)
            finally:
                if os.path.exists(tmp_path):
                    os.remove(tmp_path)
        except (OSError, TypeError) as e:
            raise PersistenceFailure(f"Could not write {path}.", e) from e

    def insert(self, collection, doc):
        if "id" not in doc:
            raise PersistenceFailure(f"Document for '{collection}' has no id.")
        with self._file_lock(collection):
            data = self._load(collection)
            data.append(doc)
            self._save(collection, data)
        return copy.deepcopy(doc)

    def get(self, collection, doc_id):
        with self._file_lock(collection):
            for doc in self._load(collection):
                if doc.get("id") == doc_id:
                    return doc
        return None

    def query(self, collection, where=None, order_by=None, descending=False, limit=None):
        with self._file_lock(collection):
            docs = self._load(collection)
        # Enum members compare equal to their stored string values
        return _select(docs, where, order_by, descending, limit)

    def update(self, collection, doc_id, fields):
        with self._file_lock(collection):
            data = self._load(collection)
            for doc in data:
                if doc.get("id") == doc_id:
                    doc.update(fields)
                    self._save(collection, data)
                    return json.loads(json.dumps(doc, default=_encode))
        return None


def build_store(backend: str, data_dir: Optional[str] = None) -> DocumentStore:
    """Create the store named by the `storage_backend` setting."""
    if backend == "memory":
        return MemoryStore()
    if backend == "json":
        if not data_dir:
            raise PersistenceFailure("The json storage backend needs a data directory.")
        return JsonFileStore(data_dir)
    raise PersistenceFailure(f"Unknown storage backend '{backend}'.")

"""
Lesson stores - real-time document collections for the catalog.

Provides:
- LessonStore: the adapter boundary (subscribe / insert / claim_seed)
- MemoryLessonStore: in-process collections, optional deferred delivery
- SqliteLessonStore: documents persisted as JSON rows in SQLite

Every subscriber receives the full current set of documents on subscribe
and again after every write to the collection. Snapshots carry no
ordering guarantee.

Bound-method callbacks are held weakly: a listener whose owner has been
garbage collected is dropped on the next broadcast, so a UI session that
goes away without cancelling does not keep receiving snapshots.
"""

import inspect
import json
import logging
import sqlite3
import threading
import time
import uuid
import weakref
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable, Optional

from .errors import StoreError


logger = logging.getLogger(__name__)

# Seconds after which an unfulfilled seed claim may be taken over
DEFAULT_SEED_CLAIM_TTL = 60.0


@dataclass(frozen=True)
class StoredDocument:
    """A document in a collection: store-assigned key plus raw data."""
    key: str
    data: dict


SnapshotCallback = Callable[[list[StoredDocument]], None]
ErrorCallback = Callable[[Exception], None]


class Subscription:
    """
    Handle for a live listener.

    Cancelling is idempotent. Usable as a context manager so the listener
    is released when the block exits.
    """

    def __init__(self, cancel: Callable[[], None]):
        self._cancel = cancel
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self):
        if not self._active:
            return
        self._active = False
        self._cancel()

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.cancel()


def _callback_ref(callback: Optional[Callable]) -> Callable[[], Optional[Callable]]:
    if callback is None:
        return lambda: None
    if inspect.ismethod(callback):
        return weakref.WeakMethod(callback)
    return lambda: callback


class _Listener:
    def __init__(self, on_snapshot: SnapshotCallback, on_error: Optional[ErrorCallback]):
        self._on_snapshot = _callback_ref(on_snapshot)
        self._on_error = _callback_ref(on_error)

    @property
    def alive(self) -> bool:
        return self._on_snapshot() is not None

    @property
    def on_snapshot(self) -> Optional[SnapshotCallback]:
        return self._on_snapshot()

    @property
    def on_error(self) -> Optional[ErrorCallback]:
        return self._on_error()


def _new_key() -> str:
    return uuid.uuid4().hex


class LessonStore(ABC):
    """
    Abstract base class for lesson collection backends.

    Subclasses implement reads and writes; listener bookkeeping and
    snapshot broadcast live here.
    """

    def __init__(self, seed_claim_ttl: float = DEFAULT_SEED_CLAIM_TTL):
        self.seed_claim_ttl = seed_claim_ttl
        self._listeners: dict[str, list[_Listener]] = {}
        self._lock = threading.Lock()

    # -------------------------------------------------------------------------
    # Backend operations
    # -------------------------------------------------------------------------

    @abstractmethod
    def documents(self, collection: str) -> list[StoredDocument]:
        """Read the full current set of documents in a collection."""

    @abstractmethod
    def _write(self, collection: str, records: list[dict]) -> list[str]:
        """
        Persist records atomically and return their new keys.

        A successful write also releases any seed claim on the collection.
        """

    @abstractmethod
    def claim_seed(self, collection: str) -> bool:
        """
        Transactionally claim the right to seed an empty collection.

        Fails while the collection holds documents or another claim is
        outstanding. A claim ends when a write lands in the collection, or
        lapses after seed_claim_ttl seconds so a claimer that died before
        writing cannot block seeding for good.
        """

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def insert(self, collection: str, data: dict) -> str:
        """Insert one document, notify subscribers, return its key."""
        return self.insert_many(collection, [data])[0]

    def insert_many(self, collection: str, records: Iterable[dict]) -> list[str]:
        """Insert documents in one batch (all or nothing), notify once."""
        records = [dict(r) for r in records]
        if not records:
            return []
        keys = self._write(collection, records)
        logger.debug(f"Inserted {len(keys)} document(s) into {collection}")
        self._broadcast(collection)
        return keys

    def subscribe(
        self,
        collection: str,
        on_snapshot: SnapshotCallback,
        on_error: Optional[ErrorCallback] = None,
    ) -> Subscription:
        """
        Listen to a collection.

        The current set is delivered right away; read failures are passed
        to on_error (or logged when no handler is given). Bound methods are
        referenced weakly, so the owner must be kept alive by the caller.
        """
        listener = _Listener(on_snapshot, on_error)
        with self._lock:
            self._listeners.setdefault(collection, []).append(listener)

        self._deliver_current(collection, [listener])
        return Subscription(lambda: self._remove_listener(collection, listener))

    def refresh(self, collection: str):
        """Re-read a collection and push it to current subscribers."""
        self._broadcast(collection)

    def listener_count(self, collection: str) -> int:
        return len(self._live_listeners(collection))

    # -------------------------------------------------------------------------
    # Delivery
    # -------------------------------------------------------------------------

    def _live_listeners(self, collection: str) -> list[_Listener]:
        """Prune listeners whose owner is gone and return the rest."""
        with self._lock:
            listeners = self._listeners.get(collection, [])
            live = [listener for listener in listeners if listener.alive]
            if len(live) != len(listeners):
                logger.debug(f"Dropped {len(listeners) - len(live)} stale listener(s) on {collection}")
                self._listeners[collection] = live
            return list(live)

    def _remove_listener(self, collection: str, listener: _Listener):
        with self._lock:
            listeners = self._listeners.get(collection, [])
            if listener in listeners:
                listeners.remove(listener)

    def _broadcast(self, collection: str):
        listeners = self._live_listeners(collection)
        if listeners:
            self._deliver_current(collection, listeners)

    def _deliver_current(self, collection: str, listeners: list[_Listener]):
        try:
            snapshot = self.documents(collection)
        except StoreError as e:
            for listener in listeners:
                self._dispatch_error(listener, e)
            return

        for listener in listeners:
            self._dispatch(listener, list(snapshot))

    def _dispatch(self, listener: _Listener, snapshot: list[StoredDocument]):
        callback = listener.on_snapshot
        if callback is not None:
            callback(snapshot)

    def _dispatch_error(self, listener: _Listener, error: Exception):
        if not listener.alive:
            return
        callback = listener.on_error
        if callback is None:
            logger.error(f"Unhandled subscription error: {error}")
            return
        callback(error)


class MemoryLessonStore(LessonStore):
    """
    In-process store.

    With deliver_immediately=False, notifications are queued (with the
    snapshot taken at write time) until flush() is called, which models a
    backend that delivers change events asynchronously.
    """

    def __init__(self, deliver_immediately: bool = True, seed_claim_ttl: float = DEFAULT_SEED_CLAIM_TTL):
        super().__init__(seed_claim_ttl)
        self.deliver_immediately = deliver_immediately
        self._collections: dict[str, dict[str, dict]] = {}
        self._claims: dict[str, float] = {}
        self._pending: deque[tuple[_Listener, object]] = deque()

    def documents(self, collection: str) -> list[StoredDocument]:
        with self._lock:
            docs = self._collections.get(collection, {})
            return [StoredDocument(key, dict(data)) for key, data in docs.items()]

    def _write(self, collection: str, records: list[dict]) -> list[str]:
        with self._lock:
            docs = self._collections.setdefault(collection, {})
            keys = []
            for record in records:
                key = _new_key()
                docs[key] = dict(record)
                keys.append(key)
            self._claims.pop(collection, None)
            return keys

    def claim_seed(self, collection: str) -> bool:
        now = time.monotonic()
        with self._lock:
            if self._collections.get(collection):
                return False
            claimed_at = self._claims.get(collection)
            if claimed_at is not None and now - claimed_at < self.seed_claim_ttl:
                return False
            self._claims[collection] = now
            return True

    def _dispatch(self, listener: _Listener, snapshot: list[StoredDocument]):
        if self.deliver_immediately:
            super()._dispatch(listener, snapshot)
        else:
            self._pending.append((listener, snapshot))

    def _dispatch_error(self, listener: _Listener, error: Exception):
        if self.deliver_immediately:
            super()._dispatch_error(listener, error)
        else:
            self._pending.append((listener, error))

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def clear(self, collection: str):
        """Remove every document, as an operator editing the backend would."""
        with self._lock:
            self._collections.pop(collection, None)
        self._broadcast(collection)

    def flush(self, limit: Optional[int] = None) -> int:
        """
        Deliver queued notifications in order, including ones queued
        while flushing. Listeners cancelled in the meantime are skipped.

        Args:
            limit: Stop after this many deliveries (default: drain the queue)

        Returns:
            Number of notifications delivered
        """
        delivered = 0
        while self._pending and (limit is None or delivered < limit):
            listener, payload = self._pending.popleft()
            if not self._is_registered(listener):
                continue
            if isinstance(payload, Exception):
                super()._dispatch_error(listener, payload)
            else:
                super()._dispatch(listener, payload)
            delivered += 1
        return delivered

    def _is_registered(self, listener: _Listener) -> bool:
        with self._lock:
            registered = any(listener in listeners for listeners in self._listeners.values())
        return registered and listener.alive

class SqliteLessonStore(LessonStore):
    """
    Lesson collections persisted in SQLite.

    Each method opens its own connection, so the store can be shared by
    Streamlit sessions running on different threads. Writes made by other
    processes reach subscribers on the next refresh().
    """

    def __init__(self, db_path: str | Path, seed_claim_ttl: float = DEFAULT_SEED_CLAIM_TTL):
        """
        Initialize store.

        Args:
            db_path: Path to the SQLite database (created if missing)
            seed_claim_ttl: Seconds before an unfulfilled seed claim lapses
        """
        super().__init__(seed_claim_ttl)
        self.db_path = Path(db_path)
        self._ensure_database()

    def _ensure_database(self):
        """Create database and tables if they don't exist."""
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(str(self.db_path))
        except (OSError, sqlite3.Error) as e:
            raise StoreError(f"Cannot open lesson store at {self.db_path}: {e}") from e

        try:
            conn.executescript("""
                CREATE TABLE IF NOT EXISTS documents (
                    collection TEXT NOT NULL,
                    key TEXT NOT NULL,
                    data TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    PRIMARY KEY (collection, key)
                );

                CREATE TABLE IF NOT EXISTS seed_claims (
                    collection TEXT PRIMARY KEY,
                    claimed_at REAL NOT NULL
                );
            """)
            conn.commit()
        except sqlite3.Error as e:
            raise StoreError(f"Cannot initialize lesson store: {e}") from e
        finally:
            conn.close()

    def _get_connection(self) -> sqlite3.Connection:
        """Get a new database connection."""
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        return conn

    def documents(self, collection: str) -> list[StoredDocument]:
        try:
            conn = self._get_connection()
            try:
                cursor = conn.execute(
                    "SELECT key, data FROM documents WHERE collection = ?",
                    (collection,)
                )
                return [
                    StoredDocument(row["key"], json.loads(row["data"]))
                    for row in cursor.fetchall()
                ]
            finally:
                conn.close()
        except (sqlite3.Error, json.JSONDecodeError) as e:
            raise StoreError(f"Failed to read {collection}: {e}") from e

    def _write(self, collection: str, records: list[dict]) -> list[str]:
        now = datetime.now().isoformat()
        keys = [_new_key() for _ in records]
        try:
            conn = self._get_connection()
            try:
                with conn:
                    conn.executemany(
                        """INSERT INTO documents (collection, key, data, created_at)
                           VALUES (?, ?, ?, ?)""",
                        [
                            (collection, key, json.dumps(record, ensure_ascii=False), now)
                            for key, record in zip(keys, records)
                        ]
                    )
                    conn.execute("DELETE FROM seed_claims WHERE collection = ?", (collection,))
            finally:
                conn.close()
        except (sqlite3.Error, TypeError, ValueError) as e:
            raise StoreError(f"Failed to write to {collection}: {e}") from e
        return keys

    def claim_seed(self, collection: str) -> bool:
        now = time.time()
        try:
            conn = self._get_connection()
            try:
                with conn:
                    conn.execute(
                        "DELETE FROM seed_claims WHERE collection = ? AND claimed_at <= ?",
                        (collection, now - self.seed_claim_ttl)
                    )
                    cursor = conn.execute(
                        """INSERT OR IGNORE INTO seed_claims (collection, claimed_at)
                           SELECT ?, ?
                           WHERE NOT EXISTS (SELECT 1 FROM documents WHERE collection = ?)""",
                        (collection, now, collection)
                    )
                    return cursor.rowcount == 1
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise StoreError(f"Failed to claim seed for {collection}: {e}") from e

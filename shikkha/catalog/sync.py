"""
LessonSync - keep an in-memory lesson list in step with the store.

State machine: UNAUTHENTICATED -> LOADING -> READY.

- An identity opens the subscription (LOADING).
- An empty snapshot seeds the collection from the fixture list, on first
  load (staying LOADING until the store reports the inserted lessons) and
  again if the collection is emptied later. One empty observation seeds
  at most once.
- A non-empty snapshot replaces the list wholesale, sorted by number (READY).
- Clearing the identity, stop() or leaving a `with` block cancels the
  subscription and drops all lesson data.

Two clients that both observe an empty collection before either seed
lands will both seed, unless claim_seed is enabled.
"""

import logging
import threading
from operator import attrgetter
from typing import Optional, Sequence

from pydantic import ValidationError

from shikkha.schemas import Identity, Lesson, LessonRecord, SyncState

from .errors import StoreError
from .store import LessonStore, StoredDocument, Subscription


logger = logging.getLogger(__name__)


class LessonSync:
    """
    Owns the synchronized lesson list.

    Readers get an immutable, number-ordered tuple via `lessons`;
    `document_count` is the raw size of the latest snapshot, malformed
    documents included.
    """

    def __init__(
        self,
        store: LessonStore,
        collection: str,
        seed_lessons: Sequence[LessonRecord],
        seed_in_batch: bool = False,
        claim_seed: bool = False,
    ):
        """
        Args:
            store: Backend holding the lesson collection
            collection: Collection path
            seed_lessons: Fixture written whenever the collection is seen empty
            seed_in_batch: Seed with one atomic batch instead of one insert per lesson
            claim_seed: Claim the empty collection transactionally before seeding
        """
        self.store = store
        self.collection = collection
        self.seed_lessons = list(seed_lessons)
        self.seed_in_batch = seed_in_batch
        self.claim_seed = claim_seed
        self.claim_seed = claim_seed

        # Store callbacks may arrive on other sessions' threads
        self._lock = threading.RLock()
        self._state = SyncState.UNAUTHENTICATED
        self._lessons: tuple[Lesson, ...] = ()
        self._subscription: Optional[Subscription] = None
        self._seeding = False
        self.document_count = 0
        self.seed_runs = 0
        self.last_error: Optional[Exception] = None

    # -------------------------------------------------------------------------
    # Read access
    # -------------------------------------------------------------------------

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def is_loading(self) -> bool:
        return self._state != SyncState.READY

    @property
    def lessons(self) -> tuple[Lesson, ...]:
        return self._lessons

    @property
    def subscribed(self) -> bool:
        return self._subscription is not None and self._subscription.active

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def handle_identity(self, identity: Optional[Identity]):
        """Identity listener: subscribe on sign-in, tear down on sign-out."""
        if identity is None:
            self.stop()
            return
        self.start()

    def start(self):
        """Open the store subscription if it is not already open."""
        with self._lock:
            if self.subscribed:
                return
            self._state = SyncState.LOADING
            self._seeding = False

        logger.info(f"Subscribing to {self.collection}")
        # Not under the lock: the first snapshot (and any seeding) runs inside subscribe()
        subscription = self.store.subscribe(
            self.collection, self._on_snapshot, self._on_error
        )
        with self._lock:
            self._subscription = subscription

    def stop(self):
        """Cancel the subscription and drop all lesson data."""
        with self._lock:
            if self._subscription is not None:
                self._subscription.cancel()
                self._subscription = None
                logger.info(f"Unsubscribed from {self.collection}")
            self._lessons = ()
            self._seeding = False
            self.document_count = 0
            self._state = SyncState.UNAUTHENTICATED

    def __enter__(self) -> "LessonSync":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.stop()

    # -------------------------------------------------------------------------
    # Store callbacks
    # -------------------------------------------------------------------------

    def _on_snapshot(self, documents: list[StoredDocument]):
        with self._lock:
            if self._state == SyncState.UNAUTHENTICATED:
                return
            self.document_count = len(documents)

            if documents:
                self._seeding = False
                lessons = self._parse(documents)
                self._lessons = tuple(sorted(lessons, key=attrgetter("number")))
                self.last_error = None
                if self._state != SyncState.READY:
                    self._state = SyncState.READY
                    logger.info(f"Lessons ready: {len(self._lessons)} in {self.collection}")
                return

            # Empty collection, whether first seen or emptied later
            self._lessons = ()
            if self._seeding:
                return
            self._seeding = True

        self._seed()

    def _on_error(self, error: Exception):
        with self._lock:
            if self._state == SyncState.UNAUTHENTICATED:
                return
            logger.error(f"Lesson subscription error: {error}")
            self.last_error = error
            self._lessons = ()
            self.document_count = 0
            self._state = SyncState.READY

    def _parse(self, documents: list[StoredDocument]) -> list[Lesson]:
        lessons = []
        for doc in documents:
            try:
                lessons.append(Lesson.from_document(doc.key, doc.data))
            except ValidationError as e:
                logger.warning(f"Skipping malformed lesson {doc.key}: {e.error_count()} error(s)")
        return lessons

    # -------------------------------------------------------------------------
    # Seeding
    # -------------------------------------------------------------------------

    def _finish_loading(self):
        with self._lock:
            if self._state == SyncState.LOADING:
                self._state = SyncState.READY

    def _seed(self):
        """
        Write the fixture list; the store's next snapshot completes loading.

        Runs outside the lock because every insert calls back into
        _on_snapshot of this and other subscribers.
        """
        if not self.seed_lessons:
            self._finish_loading()
            return

        try:
            if self.claim_seed and not self.store.claim_seed(self.collection):
                logger.info(f"Seed for {self.collection} already claimed, waiting for data")
                # The next empty snapshot may try the claim again
                with self._lock:
                    self._seeding = False
                return

            self.seed_runs += 1
            logger.info(f"{self.collection} is empty, seeding {len(self.seed_lessons)} lessons")
            documents = [record.to_document() for record in self.seed_lessons]
            if self.seed_in_batch:
                self.store.insert_many(self.collection, documents)
            else:
                for document in documents:
                    self.store.insert(self.collection, document)
        except StoreError as e:
            logger.error(f"Seeding failed: {e}")
            self.last_error = e
            self._finish_loading()

"""
LessonBrowser - the catalog as seen by one UI session.

Combines SessionBootstrapper (identity), LessonSync (data) and
LessonSubmitter (writes) with the filter/search view model.
"""

from typing import Optional, Sequence

from shikkha.config import ShikkhaConfig
from shikkha.schemas import ALL_TRACKS, Identity, Lesson, LessonRecord, SyncState
from shikkha.utils import load_seed_lessons
from shikkha.viewer import CatalogStats, compute_catalog_stats, filter_lessons

from .errors import AuthError
from .session import IdentityProvider, LocalIdentityProvider, SessionBootstrapper
from .store import LessonStore, Subscription
from .submission import AddLessonForm, LessonSubmitter
from .sync import LessonSync


class LessonBrowser:
    """
    Session-scoped catalog browser.

    open() signs in and starts syncing; close() (or leaving a `with`
    block) cancels every subscription it holds.
    """

    def __init__(
        self,
        config: ShikkhaConfig,
        store: LessonStore,
        provider: Optional[IdentityProvider] = None,
        seed_lessons: Optional[Sequence[LessonRecord]] = None,
    ):
        """
        Args:
            config: Runtime configuration
            store: Shared lesson store
            provider: Sign-in backend (default: LocalIdentityProvider)
            seed_lessons: Fixture override (default: loaded from config.seed_path)
        """
        self.config = config
        self.store = store
        self.session = SessionBootstrapper(
            provider or LocalIdentityProvider(),
            initial_token=config.initial_auth_token,
        )
        if seed_lessons is None:
            seed_lessons = load_seed_lessons(config.seed_path)
        self.sync = LessonSync(
            store,
            config.lesson_collection,
            seed_lessons,
            seed_in_batch=config.seed_in_batch,
            claim_seed=config.claim_seed,
        )
        self.submitter = LessonSubmitter(store, config.lesson_collection)
        self.selected_key: Optional[str] = None
        self._identity_subscription: Optional[Subscription] = None

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def open(self) -> Optional[Identity]:
        """Wire identity changes to the sync core, then sign in."""
        if self._identity_subscription is None:
            self._identity_subscription = self.session.on_identity_changed(
                self.sync.handle_identity
            )
        return self.session.establish()

    def close(self):
        if self._identity_subscription is not None:
            self._identity_subscription.cancel()
            self._identity_subscription = None
        self.sync.stop()
        self.selected_key = None

    def sign_out(self):
        self.session.sign_out()
        self.selected_key = None

    def refresh(self):
        """Pick up writes made outside this process."""
        if self.sync.subscribed:
            self.store.refresh(self.config.lesson_collection)

    def __enter__(self) -> "LessonBrowser":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def identity(self) -> Optional[Identity]:
        return self.session.identity

    @property
    def auth_error(self) -> Optional[AuthError]:
        return self.session.last_error

    @property
    def state(self) -> SyncState:
        return self.sync.state

    @property
    def is_loading(self) -> bool:
        return self.sync.is_loading

    @property
    def lessons(self) -> tuple[Lesson, ...]:
        return self.sync.lessons

    @property
    def stats(self) -> CatalogStats:
        return compute_catalog_stats(self.sync.lessons)

    def visible_lessons(self, search_query: str = "", active_track: str = ALL_TRACKS) -> list[Lesson]:
        return filter_lessons(self.sync.lessons, search_query, active_track)

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    def add_lesson(self, form: AddLessonForm) -> Optional[str]:
        """Submit the add-lesson form. Raises LessonValidationError."""
        return self.submitter.submit(form, existing_count=self.sync.document_count)

    def select(self, key: str):
        self.selected_key = key

    def close_player(self):
        self.selected_key = None

    @property
    def selected_lesson(self) -> Optional[Lesson]:
        if self.selected_key is None:
            return None
        for lesson in self.sync.lessons:
            if lesson.key == self.selected_key:
                return lesson
        return None

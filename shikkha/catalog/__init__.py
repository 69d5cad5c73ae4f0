"""
Shikkha Catalog - Runtime components for syncing and browsing lessons.

This module provides:
- LessonStore implementations: shared real-time lesson collections
- SessionBootstrapper: identity before data access
- LessonSync: snapshot synchronization and first-load seeding
- LessonSubmitter: add-lesson form handling
- LessonBrowser: everything above for one UI session
"""

from .errors import (
    ShikkhaError,
    AuthError,
    StoreError,
    LessonValidationError,
)

from .store import (
    StoredDocument,
    Subscription,
    LessonStore,
    MemoryLessonStore,
    SqliteLessonStore,
)

from .session import (
    IdentityProvider,
    LocalIdentityProvider,
    SessionBootstrapper,
)

from .sync import LessonSync

from .submission import (
    AddLessonForm,
    LessonSubmitter,
    build_lesson_record,
    parse_lesson_number,
)

from .browser import LessonBrowser

__all__ = [
    # Errors
    "ShikkhaError",
    "AuthError",
    "StoreError",
    "LessonValidationError",
    # Store
    "StoredDocument",
    "Subscription",
    "LessonStore",
    "MemoryLessonStore",
    "SqliteLessonStore",
    # Session
    "IdentityProvider",
    "LocalIdentityProvider",
    "SessionBootstrapper",
    # Sync
    "LessonSync",
    # Submission
    "AddLessonForm",
    "LessonSubmitter",
    "build_lesson_record",
    "parse_lesson_number",
    # Browser
    "LessonBrowser",
]

"""
End-to-end tests for LessonBrowser: sign-in, sync, search, add, play.
"""

import gc
import threading

import pytest

from shikkha.catalog import (
    AddLessonForm,
    AuthError,
    IdentityProvider,
    LessonBrowser,
    LessonValidationError,
    MemoryLessonStore,
    SqliteLessonStore,
)
from shikkha.config import ShikkhaConfig
from shikkha.schemas import SyncState


class FailingProvider(IdentityProvider):
    def sign_in_anonymously(self):
        raise AuthError("auth service unavailable")

    def sign_in_with_token(self, token):
        raise AuthError("token rejected")


@pytest.fixture
def config():
    return ShikkhaConfig(app_id="test-app")


class TestLessonBrowser:
    """Test the composed catalog browser."""

    def test_open_signs_in_and_seeds(self, config, store):
        with LessonBrowser(config, store) as browser:
            assert browser.identity is not None
            assert browser.state == SyncState.READY
            assert not browser.is_loading
            assert len(browser.lessons) == 11
            assert browser.stats.total == 11
            assert browser.stats.fundamental == 8

    def test_uses_configured_collection(self, config, store):
        with LessonBrowser(config, store):
            assert len(store.documents("artifacts/test-app/public/data/lessons")) == 11

    def test_search(self, config, store):
        with LessonBrowser(config, store) as browser:
            assert [lesson.number for lesson in browser.visible_lessons("14")] == [14]
            assert [lesson.number for lesson in browser.visible_lessons("", "Marketing")] == [296, 304]

    def test_add_lesson_scenario(self, config, store):
        with LessonBrowser(config, store) as browser:
            form = AddLessonForm(url="https://youtu.be/abcdefghijk")

            key = browser.add_lesson(form)

            added = [lesson for lesson in browser.lessons if lesson.key == key]
            assert len(added) == 1
            assert added[0].number == 12
            assert added[0].title == "Lesson 12"
            assert added[0].video_id == "abcdefghijk"
            assert browser.stats.total == 12

    def test_add_invalid_url(self, config, store):
        with LessonBrowser(config, store) as browser:
            with pytest.raises(LessonValidationError):
                browser.add_lesson(AddLessonForm(url="not-a-url"))
            assert len(browser.lessons) == 11

    def test_select_and_close_player(self, config, store):
        with LessonBrowser(config, store) as browser:
            lesson = browser.lessons[0]
            browser.select(lesson.key)
            assert browser.selected_lesson == lesson

            browser.close_player()
            assert browser.selected_lesson is None

    def test_unknown_selection(self, config, store):
        with LessonBrowser(config, store) as browser:
            browser.select("missing")
            assert browser.selected_lesson is None

    def test_sign_out_releases_data(self, config, store):
        browser = LessonBrowser(config, store)
        browser.open()

        browser.sign_out()

        assert browser.state == SyncState.UNAUTHENTICATED
        assert browser.lessons == ()
        assert store.listener_count(config.lesson_collection) == 0

    def test_close_cancels_subscriptions(self, config, store):
        browser = LessonBrowser(config, store)
        browser.open()
        browser.close()

        assert store.listener_count(config.lesson_collection) == 0
        browser.session.sign_out()
        assert browser.state == SyncState.UNAUTHENTICATED

    def test_auth_failure_keeps_loading(self, config, store):
        browser = LessonBrowser(config, store, provider=FailingProvider())

        assert browser.open() is None

        assert isinstance(browser.auth_error, AuthError)
        assert browser.is_loading
        assert store.listener_count(config.lesson_collection) == 0

    def test_custom_token_identity(self, store):
        config = ShikkhaConfig(app_id="test-app", initial_auth_token="custom-token")
        with LessonBrowser(config, store) as browser:
            assert browser.identity.is_anonymous is False

    def test_second_session_sees_first_sessions_lesson(self, config):
        store = MemoryLessonStore()
        with LessonBrowser(config, store) as first, LessonBrowser(config, store) as second:
            first.add_lesson(AddLessonForm(url="https://youtu.be/abcdefghijk", number="500"))
            assert second.lessons[-1].number == 500
            assert second.stats.total == 12

    def test_sqlite_store_end_to_end(self, config, tmp_path):
        db_path = tmp_path / "shikkha.db"
        with LessonBrowser(config, SqliteLessonStore(db_path)) as browser:
            browser.add_lesson(AddLessonForm(url="https://youtu.be/abcdefghijk", number="500"))

        with LessonBrowser(config, SqliteLessonStore(db_path)) as browser:
            assert len(browser.lessons) == 12
            assert browser.lessons[-1].number == 500
            assert browser.sync.seed_runs == 0

    def test_refresh_sees_other_process(self, config, tmp_path):
        db_path = tmp_path / "shikkha.db"
        with LessonBrowser(config, SqliteLessonStore(db_path)) as browser:
            SqliteLessonStore(db_path).insert(
                config.lesson_collection,
                {"n": 600, "t": "External", "id": "abcdefghijk", "track": "Engineering"},
            )
            assert len(browser.lessons) == 11

            browser.refresh()

            assert len(browser.lessons) == 12
            assert browser.stats.engineering == 2

    def test_add_lesson_numbers_past_malformed_documents(self, config, store):
        store.insert(config.lesson_collection, {"n": "seven", "t": "", "id": "x"})
        store.insert(config.lesson_collection, {"n": 1, "t": "Intro", "id": "U0HQwhJYTWM", "track": "Fundamental"})
        with LessonBrowser(config, store) as browser:
            assert len(browser.lessons) == 1

            key = browser.add_lesson(AddLessonForm(url="https://youtu.be/abcdefghijk"))

            added = [lesson for lesson in browser.lessons if lesson.key == key]
            assert added[0].number == 3

    def test_abandoned_sessions_release_listeners(self, config, store):
        for _ in range(5):
            LessonBrowser(config, store).open()
        gc.collect()

        assert store.listener_count(config.lesson_collection) == 0
        store.insert(config.lesson_collection, {"n": 700, "t": "Late", "id": "abcdefghijk", "track": "Marketing"})

    def test_open_session_keeps_listener(self, config, store):
        browser = LessonBrowser(config, store)
        browser.open()
        gc.collect()

        assert store.listener_count(config.lesson_collection) == 1
        assert len(browser.lessons) == 11


class TestCrossThreadDelivery:
    """Sessions on different threads sharing one store."""

    def test_writes_from_other_threads_reach_every_session(self, config, tmp_path):
        store = SqliteLessonStore(tmp_path / "shikkha.db")
        browsers = [LessonBrowser(config, store) for _ in range(4)]
        for browser in browsers:
            browser.open()
        errors = []

        def add_lessons(browser, offset):
            try:
                for i in range(5):
                    browser.add_lesson(
                        AddLessonForm(url="https://youtu.be/abcdefghijk", number=str(1000 + offset + i))
                    )
            except Exception as e:
                errors.append(e)

        threads = [
            threading.Thread(target=add_lessons, args=(browser, index * 10))
            for index, browser in enumerate(browsers)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        assert len(store.documents(config.lesson_collection)) == 31
        for browser in browsers:
            # Snapshots may land out of order; each one is still a consistent set
            assert browser.state == SyncState.READY
            numbers = [lesson.number for lesson in browser.lessons]
            assert numbers == sorted(numbers)
            assert 11 < len(numbers) <= 31

        browsers[0].refresh()

        for browser in browsers:
            assert len(browser.lessons) == 31
            browser.close()

    def test_snapshot_from_worker_thread_updates_session(self, config, store):
        with LessonBrowser(config, store) as browser:
            worker = threading.Thread(
                target=store.insert,
                args=(config.lesson_collection, {"n": 800, "t": "Threaded", "id": "abcdefghijk", "track": "Engineering"}),
            )
            worker.start()
            worker.join()

            assert browser.lessons[-1].number == 800
            assert browser.stats.engineering == 2

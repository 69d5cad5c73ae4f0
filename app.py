"""
Shikkha - Video Lesson Catalog

Streamlit application for browsing, searching and playing a shared
catalog of video lessons, kept in sync with the lesson store.

Usage:
    streamlit run app.py
"""

import logging

import streamlit as st
import streamlit.components.v1 as components

from shikkha.config import load_config
from shikkha.catalog import (
    AddLessonForm,
    LessonBrowser,
    LessonValidationError,
    SqliteLessonStore,
)
from shikkha.schemas import ALL_TRACKS, Track
from shikkha.viewer import (
    TRACK_FILTERS,
    TRACK_STYLES,
    track_filter_label,
    get_catalog_css,
    render_lesson_card,
    render_empty_state,
    render_player,
    watch_url,
)


# -----------------------------------------------------------------------------
# Configuration
# -----------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s"
)

GRID_COLUMNS = 3

st.set_page_config(
    page_title="Shikkha Lab",
    page_icon="🎬",
    layout="wide",
    initial_sidebar_state="expanded",
)


@st.cache_resource
def get_config():
    return load_config()


@st.cache_resource
def get_store(db_path: str) -> SqliteLessonStore:
    """One store per process so every session sees the others' writes."""
    return SqliteLessonStore(db_path)


# -----------------------------------------------------------------------------
# Session State Initialization
# -----------------------------------------------------------------------------

def init_session_state():
    """Initialize session state variables."""
    config = get_config()

    if "browser" not in st.session_state:
        browser = LessonBrowser(config, get_store(str(config.db_path)))
        browser.open()
        st.session_state.browser = browser
    else:
        st.session_state.browser.refresh()

    if "search" not in st.session_state:
        st.session_state.search = ""

    if "active_track" not in st.session_state:
        st.session_state.active_track = ALL_TRACKS

    if "add_form" not in st.session_state:
        st.session_state.add_form = AddLessonForm()


# -----------------------------------------------------------------------------
# Sidebar: Search, Tracks, Add Lesson
# -----------------------------------------------------------------------------

def render_sidebar():
    """Render search, track filter, totals and the add-lesson form."""
    browser = st.session_state.browser
    st.sidebar.title("🎬 Shikkha Lab")

    st.sidebar.text_input(
        "Search",
        key="search",
        placeholder="ক্লাস নম্বর বা নাম দিয়ে খুঁজুন...",
    )

    st.sidebar.radio(
        "Track",
        TRACK_FILTERS,
        key="active_track",
        format_func=track_filter_label,
    )

    st.sidebar.divider()

    stats = browser.stats
    st.sidebar.metric("Total classes", stats.total)
    for track in Track:
        style = TRACK_STYLES[track.value]
        st.sidebar.markdown(f"{style['icon']} **{track.value}:** {stats.by_track[track.value]}")

    st.sidebar.divider()
    render_add_lesson_form()

    st.sidebar.divider()
    identity = browser.identity
    if identity:
        st.sidebar.caption(f"Signed in as `{identity.uid}`")
        if st.sidebar.button("Sign out"):
            browser.close()
            del st.session_state.browser
            st.rerun()


def render_add_lesson_form():
    """Render the add-lesson form (URL, number, track, title)."""
    browser = st.session_state.browser
    form_state = st.session_state.add_form

    with st.sidebar.expander("➕ নতুন ক্লাস যোগ করুন"):
        with st.form("add_lesson"):
            url = st.text_input("YouTube URL", value=form_state.url, placeholder="https://youtu.be/...")
            number = st.text_input("Class number", value=form_state.number, placeholder="e.g. 305")
            track = st.selectbox(
                "Track",
                list(Track),
                index=list(Track).index(form_state.track),
                format_func=lambda t: t.value,
            )
            title = st.text_input("Title", value=form_state.title)
            submitted = st.form_submit_button("Add lesson", type="primary", use_container_width=True)

        if not submitted:
            return

        form_state.url = url
        form_state.number = number
        form_state.track = track
        form_state.title = title

        try:
            key = browser.add_lesson(form_state)
        except LessonValidationError as e:
            st.error(str(e))
            return

        if key is None:
            st.error("Could not save the lesson. Please try again.")
        else:
            st.rerun()


# -----------------------------------------------------------------------------
# Main Content: Player and Grid
# -----------------------------------------------------------------------------

def render_player_view():
    """Render the embedded player for the selected lesson."""
    browser = st.session_state.browser
    lesson = browser.selected_lesson
    if not lesson:
        return

    col1, col2 = st.columns([9, 1])
    with col1:
        st.subheader(f"Class {lesson.number}: {lesson.title}")
    with col2:
        if st.button("✕", key="close_player", use_container_width=True):
            browser.close_player()
            st.rerun()

    components.html(render_player(lesson.video_id, lesson.title), height=480)
    st.markdown(f"[Open on YouTube ↗]({watch_url(lesson.video_id)})")
    st.divider()


def render_catalog_view():
    """Render the filtered lesson grid."""
    browser = st.session_state.browser

    if browser.auth_error:
        st.error("Sign-in failed. Lessons cannot be loaded.")
        return

    if browser.is_loading:
        st.info("⏳ Loading lessons...")
        return

    if browser.sync.last_error:
        st.warning("Lessons could not be loaded from the store.")

    st.title("ক্লাস লাইব্রেরি")
    st.caption(f"আপনার জন্য মোট {browser.stats.total} টি ক্লাস বরাদ্দ করা আছে")

    search = st.session_state.search
    lessons = browser.visible_lessons(search, st.session_state.active_track)

    st.markdown(get_catalog_css(), unsafe_allow_html=True)

    if not lessons:
        st.markdown(render_empty_state(search), unsafe_allow_html=True)
        return

    for start in range(0, len(lessons), GRID_COLUMNS):
        columns = st.columns(GRID_COLUMNS)
        for column, lesson in zip(columns, lessons[start:start + GRID_COLUMNS]):
            with column:
                st.markdown(render_lesson_card(lesson), unsafe_allow_html=True)
                if st.button("▶ Play", key=f"play_{lesson.key}", use_container_width=True):
                    browser.select(lesson.key)
                    st.rerun()


# -----------------------------------------------------------------------------
# Main App
# -----------------------------------------------------------------------------

def main():
    """Main application entry point."""
    init_session_state()
    render_sidebar()
    render_player_view()
    render_catalog_view()


if __name__ == "__main__":
    main()

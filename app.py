"""
Boulder Progress Dashboard - Main Application File

This file sets up the Streamlit application, loads the snapshot from the
hosted store once per cache period, and delegates the rendering of each
tab to specific modules.

Usage: streamlit run app.py
"""

#-----------------------------------------------------------------------------
# IMPORTS AND DEPENDENCIES
#-----------------------------------------------------------------------------
import logging

import streamlit as st

# Local modules
import config
from data_processing import ProgressPayload, SnapshotError, process_data
from supabase_client import StoreError, SupabaseRepository
from tabs.progress_tab import display_progress
from tabs.sessions_tab import display_sessions
from utils import get_debug_mode, get_log_level, get_timezone, load_css

logging.basicConfig(level=get_log_level())
logger = logging.getLogger(__name__)

#-----------------------------------------------------------------------------
# APP CONFIGURATION
#-----------------------------------------------------------------------------
st.set_page_config(
    page_title=config.APP_TITLE,
    page_icon="🧗",
    layout="centered",
)

load_css(config.CSS_FILE)

#-----------------------------------------------------------------------------
# DATA LOADING
#-----------------------------------------------------------------------------
@st.cache_data(ttl=600, show_spinner=False)
def load_payload() -> ProgressPayload:
    """Fetch the snapshot and build the progress payload, cached for ten minutes."""
    return process_data(SupabaseRepository.from_env(), tz=get_timezone())


def display_debug_info(payload: ProgressPayload) -> None:
    """Show raw payload details when debug mode is enabled."""
    if get_debug_mode():
        with st.expander("🔧 Debug Info", expanded=False):
            st.write("**Generated at:**", payload.generated_at.isoformat())
            st.json(payload.to_dict(), expanded=False)

#-----------------------------------------------------------------------------
# MAIN APPLICATION LOGIC
#-----------------------------------------------------------------------------
def main() -> None:
    """Main function to run the Streamlit application."""
    st.title("Progress")
    st.caption("Your trends & milestones.")

    try:
        with st.spinner("Crunching the numbers... Please wait."):
            payload = load_payload()
    except (StoreError, SnapshotError) as e:
        logger.exception("Failed to load progress data: %s", e)
        st.error("😔 Could not load your climbing data. Please try refreshing the page.")
        return

    tab1, tab2 = st.tabs(["📈 Progress", "🗓️ Sessions"])
    with tab1:
        display_progress(payload)
    with tab2:
        display_sessions(payload.sessions)

    display_debug_info(payload)


if __name__ == "__main__":
    main()

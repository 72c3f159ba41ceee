import logging
import os
from typing import Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

import config # Import config

logger = logging.getLogger(__name__)

# Helper function to load CSS
def load_css(file_name: str) -> None:
    """Loads CSS from a file into the Streamlit app."""
    import streamlit as st

    try:
        with open(file_name, encoding='utf-8') as f:
            st.markdown(f'<style>{f.read()}</style>', unsafe_allow_html=True)
    except FileNotFoundError:
        st.warning(f"CSS file '{file_name}' not found. Using default styles.")

def get_debug_mode() -> bool:
    """
    Get the debug mode setting from environment variables.
    Returns True if DEBUG_MODE is set to 'true', otherwise False.
    """
    load_dotenv()  # Load environment variables from .env file
    return os.getenv('DEBUG_MODE', config.DEFAULT_DEBUG_MODE).lower() == 'true'

def get_log_level() -> int:
    """Resolve LOG_LEVEL to a logging level, falling back to INFO."""
    load_dotenv()
    name = os.getenv('LOG_LEVEL', config.DEFAULT_LOG_LEVEL).strip().upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO

def get_store_credentials() -> Tuple[Optional[str], Optional[str]]:
    """
    Get the hosted store URL and API key from environment variables.
    Either value is None when not configured.
    """
    load_dotenv()
    url = (os.getenv('SUPABASE_URL') or '').strip() or None
    key = (os.getenv('SUPABASE_KEY') or '').strip() or None
    return url, key

def get_store_timeout() -> float:
    load_dotenv()
    raw = os.getenv('STORE_TIMEOUT_SECONDS', str(config.DEFAULT_STORE_TIMEOUT_SECONDS))
    try:
        return max(1.0, float(raw))
    except ValueError:
        logger.warning("Invalid STORE_TIMEOUT_SECONDS '%s'; using default.", raw)
        return config.DEFAULT_STORE_TIMEOUT_SECONDS

def get_timezone(name: Optional[str] = None) -> ZoneInfo:
    """
    Get the timezone used to assign attempts to calendar days.

    Args:
        name: IANA timezone name. Read from PROGRESS_TIMEZONE when omitted.

    Returns:
        ZoneInfo for the name, or UTC when the name is unknown.
    """
    if name is None:
        load_dotenv()
        name = os.getenv('PROGRESS_TIMEZONE', config.DEFAULT_TIMEZONE)
    try:
        return ZoneInfo(name.strip() or config.DEFAULT_TIMEZONE)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone '%s'; falling back to UTC.", name)
        return ZoneInfo(config.DEFAULT_TIMEZONE)

"""
Configuration and Constants for the Boulder Progress Dashboard
"""

# --- General App Settings ---
CSS_FILE = "style.css"
APP_TITLE = "Boulder Progress"

# --- Environment Variable Defaults ---
# Used in utils.py when reading .env
DEFAULT_DEBUG_MODE = 'false'
DEFAULT_LOG_LEVEL = 'INFO'
DEFAULT_TIMEZONE = 'UTC'
DEFAULT_STORE_TIMEOUT_SECONDS = 10.0

# --- Persistent Store Tables ---
TABLE_PROBLEMS = 'problems'
TABLE_ATTEMPTS = 'attempts'
TABLE_SESSIONS = 'sessions'
TABLE_GYMS = 'gyms'
TABLE_GYM_GRADES = 'gym_grades'

# --- Attempt Outcomes ---
# Ordered by climbing progress, not by time
OUTCOMES = ('start', 'crux', 'almost', 'sent')
OUTCOME_SENT = 'sent'
PROBLEM_STATUSES = ('project', 'sent')
ENERGY_LEVELS = ('low', 'normal', 'high')
DEFAULT_ENERGY = 'normal'

# --- Grade Resolution ---
UNKNOWN_GRADE_LABEL = 'Unknown'
# Fallback vocabulary for free-text grades, easiest first.
# Matched as a case-insensitive substring, first token in this order wins.
FALLBACK_GRADE_ORDER = [
    '4', '4+',
    '5', '5+',
    '5a', '5a+',
    '5b', '5b+',
    '5c', '5c+',
    '6a', '6a+',
    '6b', '6b+',
    '6c', '6c+',
    '7a', '7a+',
    '7b', '7b+',
    '7c', '7c+',
    '8a', '8a+',
    '8b', '8b+',
    '8c', '8c+',
]

# --- Analysis Windows ---
ROLLING_WINDOW_DAYS = 14
WEEKLY_WINDOW_WEEKS = 8
HEATMAP_WINDOW_DAYS = 28

# --- Coaching Zones (lower bound of each zone, evaluated high to low) ---
ZONE_CRUISING_MIN_RATE = 0.25
ZONE_GROWTH_MIN_RATE = 0.12
ZONE_LIMIT_MIN_RATE = 0.05

# --- Attempts-To-Send Buckets ---
FLASH_MAX_ATTEMPTS = 2
LEARN_MAX_ATTEMPTS = 6

# --- Session Classifier ---
FLOW_MIN_SENDS = 3
FLOW_MAX_ATTEMPTS_PER_SEND = 3
PROGRESS_MIN_SENDS = 1
PROGRESS_MIN_ATTEMPTS = 15
VOLUME_MIN_ATTEMPTS = 25

# --- Trailing-Window Recommendations ---
RECO_PROJECTION_MAX_RATE = 0.08
RECO_PROJECTION_MIN_ATTEMPTS = 15
RECO_FLOW_MIN_RATE = 0.15
RECO_FLOW_MIN_SENDS = 3
RECO_LOW_VOLUME_MAX_ATTEMPTS = 10
RECO_WORKED_MIN_PCT = 55
RECO_WORKED_MIN_PROBLEMS = 6
MAX_RECOMMENDATIONS = 2

# --- UI Configuration ---
RECENT_SENDS_LIMIT = 5
RECENT_MILESTONES_LIMIT = 8

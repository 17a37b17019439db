"""Central constants for Streamlit session state keys, storage keys and thresholds."""

SS_GOALS: str = "goals"
SS_CONVERSATION: str = "conversation"
SS_PROFILE: str = "profile"
SS_CONVERTED_DIAGNOSES: str = "converted_diagnoses"
SS_SERVICES: str = "_services"
SS_API_STATUS: str = "_api_status"
SS_LAST_REPLY_ERROR: str = "_last_reply_error"
SS_STORAGE_LOADED: str = "_storage_loaded"

NOTIFICATIONS_STORAGE_KEY: str = "coach-notifications"

NOTIFICATION_RETENTION_DAYS: int = 30
REMINDER_POLL_INTERVAL_SECONDS: int = 5 * 60
URGENT_POLL_INTERVAL_SECONDS: int = 2 * 60

STUCK_AFTER_DAYS: int = 7
STUCK_MIN_HISTORY_ENTRIES: int = 2
STUCK_DEADLINE_WINDOW_DAYS: int = 14
LOW_PROGRESS_DEADLINE_WINDOW_DAYS: int = 30
DEADLINE_WARNING_DAYS: int = 7
NEAR_COMPLETION_PERCENT: float = 80.0
LOW_PROGRESS_PERCENT: float = 30.0
URGENT_PROGRESS_PERCENT: float = 50.0

MICROMETA_TITLE_MAX_CHARS: int = 50
GOAL_TITLE_MAX_CHARS: int = 60
CONVERSATION_HISTORY_LIMIT: int = 200


def cap_list_tail(values: list, limit: int) -> list:
    """Keep only the newest ``limit`` entries of a list."""

    if limit <= 0:
        return []
    return values[-limit:]

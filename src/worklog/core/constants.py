"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

WORK_DURATION_MINUTES = 7 * 60 + 12
MANDATORY_BREAK_MINUTES = 30
OFFICE_OPEN_MINUTE = 7 * 60 + 30
OFFICE_CLOSE_MINUTE = 19 * 60
LUNCH_WINDOW_START_MINUTE = 12 * 60
LUNCH_WINDOW_END_MINUTE = 15 * 60
MIN_WORK_FOR_LUNCH_MINUTES = 6 * 60
CHECKPOINT_MINUTE = 14 * 60 + 12
MIN_WORK_BY_CHECKPOINT_MINUTES = 3 * 60 + 36

DAYS_STORAGE_KEY = "worklog:v1:days"
SETTINGS_STORAGE_KEY = "worklog:v1:settings"
AUTO_SAVE_KEY = "auto_save"

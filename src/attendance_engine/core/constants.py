"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_CHECK_IN_TIME = "09:00"
DEFAULT_CHECK_OUT_TIME = "18:00"
DEFAULT_LATE_THRESHOLD_MINUTES = 15
DEFAULT_FULL_DAY_HOURS = 8.0
DEFAULT_HALF_DAY_HOURS = 4.0
DEFAULT_ABSENT_THRESHOLD_MINUTES = 60
DEFAULT_TIMEZONE = "Asia/Kolkata"
DEFAULT_WORKING_DAYS = ("monday", "tuesday", "wednesday", "thursday", "friday")

WEEKDAY_NAMES = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

# Fraction of full_day_hours that counts as a full day.
PRESENT_RATIO = 0.9

EARTH_RADIUS_M = 6_371_000
EARLY_CHECKOUT_BUFFER_SECONDS = 60

PRE_SHIFT_REMINDER_MINUTES = 15
OVERTIME_PROMPT_DELAY_MINUTES = 30
AUTO_CHECKOUT_GRACE_HOURS = 2

REMARK_SEPARATOR = " | "
DEFAULT_OVERTIME_LIST_LIMIT = 10
DEFAULT_HISTORY_LIMIT = 30

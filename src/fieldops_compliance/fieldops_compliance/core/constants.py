"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
Operational policy values are only defaults; settings modules override them.
"""

EARTH_RADIUS_M = 6371000

DEFAULT_MORNING_LOGIN_CUTOFF = "08:00"
DEFAULT_MORNING_GRACE_MINUTES = 15
DEFAULT_LUNCH_START = "12:00"
DEFAULT_LUNCH_END = "13:00"
DEFAULT_LUNCH_GRACE_MINUTES = 15
DEFAULT_EVENING_LOGOUT_NORMAL = "17:00"
DEFAULT_EVENING_LOGOUT_EXTENDED = "19:00"
DEFAULT_EVENING_GRACE_MINUTES = 30
DEFAULT_WORK_START_HOUR = 6

DEFAULT_GRACE_CAP_MINUTES = 60
DEFAULT_GRACE_AUTO_APPROVAL_MINUTES = 15
DEFAULT_LOW_RISK_DELAY_REASONS = ("traffic", "weather", "fuel")
DEFAULT_REPLACEMENT_SUGGESTION_MINUTES = 30

DEFAULT_REGULARIZATION_HOURS = 10
DEFAULT_FORGOTTEN_HOURS = 12

MAX_FUEL_LEVEL = 100

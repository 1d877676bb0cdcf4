# Fixed values; tests must not depend on the developer's environment.
MORNING_LOGIN_CUTOFF = "08:00"
MORNING_GRACE_MINUTES = 15
LUNCH_START = "12:00"
LUNCH_END = "13:00"
LUNCH_GRACE_MINUTES = 15
EVENING_LOGOUT_NORMAL = "17:00"
EVENING_LOGOUT_EXTENDED = "19:00"
EVENING_GRACE_MINUTES = 30
WORK_START_HOUR = 6
ENFORCE_MORNING_LOGIN = True

GRACE_CAP_MINUTES = 60
GRACE_AUTO_APPROVAL_MINUTES = 15
GRACE_LOW_RISK_REASONS = "traffic,weather,fuel"
REPLACEMENT_SUGGESTION_MINUTES = 30

REGULARIZATION_HOURS = 10
FORGOTTEN_HOURS = 12

LOG_LEVEL = "WARNING"
LOG_JSON = True
TESTING = True

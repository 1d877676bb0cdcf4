import os


class Config:
    # Shift boundaries (HH:MM, local time)
    MORNING_LOGIN_CUTOFF = os.environ.get("MORNING_LOGIN_CUTOFF", "08:00")
    MORNING_GRACE_MINUTES = int(os.environ.get("MORNING_GRACE_MINUTES", "15"))
    LUNCH_START = os.environ.get("LUNCH_START", "12:00")
    LUNCH_END = os.environ.get("LUNCH_END", "13:00")
    LUNCH_GRACE_MINUTES = int(os.environ.get("LUNCH_GRACE_MINUTES", "15"))
    EVENING_LOGOUT_NORMAL = os.environ.get("EVENING_LOGOUT_NORMAL", "17:00")
    EVENING_LOGOUT_EXTENDED = os.environ.get("EVENING_LOGOUT_EXTENDED", "19:00")
    EVENING_GRACE_MINUTES = int(os.environ.get("EVENING_GRACE_MINUTES", "30"))
    WORK_START_HOUR = int(os.environ.get("WORK_START_HOUR", "6"))
    ENFORCE_MORNING_LOGIN = bool(int(os.environ.get("ENFORCE_MORNING_LOGIN", "1")))

    # Delay grace periods and escalation
    GRACE_CAP_MINUTES = int(os.environ.get("GRACE_CAP_MINUTES", "60"))
    GRACE_AUTO_APPROVAL_MINUTES = int(os.environ.get("GRACE_AUTO_APPROVAL_MINUTES", "15"))
    GRACE_LOW_RISK_REASONS = os.environ.get("GRACE_LOW_RISK_REASONS", "traffic,weather,fuel")
    REPLACEMENT_SUGGESTION_MINUTES = int(os.environ.get("REPLACEMENT_SUGGESTION_MINUTES", "30"))

    # Forgotten checkout
    REGULARIZATION_HOURS = float(os.environ.get("REGULARIZATION_HOURS", "10"))
    FORGOTTEN_HOURS = float(os.environ.get("FORGOTTEN_HOURS", "12"))

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    LOG_JSON = bool(int(os.environ.get("LOG_JSON", "1")))


MORNING_LOGIN_CUTOFF = Config.MORNING_LOGIN_CUTOFF
MORNING_GRACE_MINUTES = Config.MORNING_GRACE_MINUTES
LUNCH_START = Config.LUNCH_START
LUNCH_END = Config.LUNCH_END
LUNCH_GRACE_MINUTES = Config.LUNCH_GRACE_MINUTES
EVENING_LOGOUT_NORMAL = Config.EVENING_LOGOUT_NORMAL
EVENING_LOGOUT_EXTENDED = Config.EVENING_LOGOUT_EXTENDED
EVENING_GRACE_MINUTES = Config.EVENING_GRACE_MINUTES
WORK_START_HOUR = Config.WORK_START_HOUR
ENFORCE_MORNING_LOGIN = Config.ENFORCE_MORNING_LOGIN

GRACE_CAP_MINUTES = Config.GRACE_CAP_MINUTES
GRACE_AUTO_APPROVAL_MINUTES = Config.GRACE_AUTO_APPROVAL_MINUTES
GRACE_LOW_RISK_REASONS = Config.GRACE_LOW_RISK_REASONS
REPLACEMENT_SUGGESTION_MINUTES = Config.REPLACEMENT_SUGGESTION_MINUTES

REGULARIZATION_HOURS = Config.REGULARIZATION_HOURS
FORGOTTEN_HOURS = Config.FORGOTTEN_HOURS

LOG_LEVEL = Config.LOG_LEVEL
LOG_JSON = Config.LOG_JSON

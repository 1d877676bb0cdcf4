import os

from config.config import *  # noqa: F401,F403

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_JSON = True

ENFORCE_MORNING_LOGIN = bool(int(os.getenv("ENFORCE_MORNING_LOGIN", "1")))

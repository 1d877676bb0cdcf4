import os

from config.config import *  # noqa: F401,F403

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
# Human-readable console output while developing
LOG_JSON = bool(int(os.getenv("LOG_JSON", "0")))

# Drivers testing the app locally log in at odd hours
ENFORCE_MORNING_LOGIN = bool(int(os.getenv("ENFORCE_MORNING_LOGIN", "0")))

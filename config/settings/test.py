# config/settings/test.py
import os

from .base import *  # noqa

DEBUG = False

# Postgres when DB_NAME is set (CI), otherwise in-memory SQLite.
if not os.getenv("DB_NAME"):
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": ":memory:",
        }
    }

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

LOGGING["loggers"]["clinic_core"]["level"] = "WARNING"  # noqa: F405
LOGGING["loggers"]["clinic_core"]["propagate"] = True  # noqa: F405

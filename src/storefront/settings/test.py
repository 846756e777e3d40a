"""Test settings for the Storefront API project."""

import tempfile
from pathlib import Path

from .base import *  # noqa: F401,F403

DEBUG = False

SECRET_KEY = "test-secret-key-not-for-production"

ALLOWED_HOSTS = ["testserver", "localhost"]

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
    }
}

EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"

LOG_DIR = Path(tempfile.mkdtemp(prefix="storefront-logs-"))
API_LOG_FILE = str(LOG_DIR / "api.log")
LOGGING["handlers"]["api_file"]["filename"] = API_LOG_FILE  # noqa: F405

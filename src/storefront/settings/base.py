"""Base settings for the Storefront API project."""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Build paths inside the project
BASE_DIR = Path(__file__).resolve().parent.parent.parent.parent
SRC_DIR = BASE_DIR / "src"

# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = os.environ.get("SECRET_KEY")

# Debug mode - override in prod.py / test.py
DEBUG = False

ALLOWED_HOSTS = []

# Application definition
DJANGO_APPS = [
    "django.contrib.contenttypes",
    "django.contrib.auth",
]

THIRD_PARTY_APPS = [
    "rest_framework",
]

# Local apps
LOCAL_APPS = [
    "storefront.core",
    "storefront.opencart",
    "storefront.accounts",
    "storefront.catalog",
    "storefront.sales",
    "storefront.reports",
]

INSTALLED_APPS = DJANGO_APPS + THIRD_PARTY_APPS + LOCAL_APPS

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
    "storefront.core.middleware.JsonExceptionMiddleware",
]

ROOT_URLCONF = "storefront.urls"

WSGI_APPLICATION = "storefront.wsgi.application"

# Database - the OpenCart MySQL schema (tables are not managed by Django)
DATABASES = {
    "default": {
        "ENGINE": os.environ.get("DB_ENGINE", "django.db.backends.mysql"),
        "NAME": os.environ.get("DB_NAME", "opencart"),
        "USER": os.environ.get("DB_USER", "root"),
        "PASSWORD": os.environ.get("DB_PASSWORD", ""),
        "HOST": os.environ.get("DB_HOST", "localhost"),
        "PORT": os.environ.get("DB_PORT", "3306"),
        "OPTIONS": {
            "charset": "utf8mb4",
            "connect_timeout": 10,
        },
        "CONN_MAX_AGE": 60,
        "CONN_HEALTH_CHECKS": True,
    }
}

# Cache configuration
CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.redis.RedisCache",
        "LOCATION": os.environ.get("REDIS_URL", "redis://localhost:6379/0"),
    }
}

# Django REST framework is only used for request validation
REST_FRAMEWORK = {
    "UNAUTHENTICATED_USER": None,
}

# Email (password reset tokens)
EMAIL_BACKEND = os.environ.get("EMAIL_BACKEND", "django.core.mail.backends.smtp.EmailBackend")
EMAIL_HOST = os.environ.get("EMAIL_HOST", "localhost")
EMAIL_PORT = int(os.environ.get("EMAIL_PORT", "25"))
EMAIL_HOST_USER = os.environ.get("EMAIL_HOST_USER", "")
EMAIL_HOST_PASSWORD = os.environ.get("EMAIL_HOST_PASSWORD", "")
EMAIL_USE_TLS = os.environ.get("EMAIL_USE_TLS", "false").lower() == "true"
DEFAULT_FROM_EMAIL = os.environ.get("DEFAULT_FROM_EMAIL", "no-reply@localhost")

# Internationalization
# OpenCart stores naive local datetimes.
LANGUAGE_CODE = "en-us"
TIME_ZONE = os.environ.get("TIME_ZONE", "Asia/Riyadh")
USE_I18N = False
USE_TZ = False

# Default primary key field type
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# Storefront configuration
STORE_NAME = os.environ.get("STORE_NAME", "Storefront")
STORE_URL = os.environ.get("STORE_URL", "http://localhost/")
IMAGE_BASE_URL = os.environ.get("IMAGE_BASE_URL", "/image/")
OPENCART_LANGUAGE_ID = int(os.environ.get("OPENCART_LANGUAGE_ID", "1"))
OPENCART_CUSTOMER_GROUP_ID = int(os.environ.get("OPENCART_CUSTOMER_GROUP_ID", "1"))
ADMIN_CUSTOMER_GROUP_ID = int(os.environ.get("ADMIN_CUSTOMER_GROUP_ID", "0"))
CURRENCY_CODE = os.environ.get("CURRENCY_CODE", "SAR")
CURRENCY_ID = int(os.environ.get("CURRENCY_ID", "1"))
ORDER_FROM = os.environ.get("ORDER_FROM", "mobile_app")

# Checkout
CHECKOUT_FLAT_SHIPPING = os.environ.get("CHECKOUT_FLAT_SHIPPING", "15.00")
CHECKOUT_TAX = os.environ.get("CHECKOUT_TAX", "0.00")

# Order status ids from oc_order_status
ORDER_STATUS_PENDING = 1
ORDER_STATUS_PROCESSING = 2
ORDER_STATUS_CANCELED = 7
ORDER_STATUS_CANCELLABLE = [ORDER_STATUS_PENDING, ORDER_STATUS_PROCESSING]
ORDER_STATUS_FAILURES = [10, 11]

# Reports
REPORT_CACHE_SECONDS = int(os.environ.get("REPORT_CACHE_SECONDS", "300"))

# API tokens
PASSWORD_RESET_TIMEOUT_MINUTES = int(os.environ.get("PASSWORD_RESET_TIMEOUT_MINUTES", "60"))

# JSON-lines log read back by the admin log endpoint
LOG_DIR = Path(os.environ.get("LOG_DIR", BASE_DIR / "logs"))
API_LOG_FILE = os.environ.get("API_LOG_FILE", str(LOG_DIR / "api.log"))

# Logging configuration
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "{levelname} {asctime} {module} {message}",
            "style": "{",
        },
        "json": {
            "()": "pythonjsonlogger.jsonlogger.JsonFormatter",
            "format": "%(asctime)s %(levelname)s %(name)s %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
        "api_file": {
            "class": "logging.handlers.RotatingFileHandler",
            "filename": API_LOG_FILE,
            "maxBytes": 10 * 1024 * 1024,
            "backupCount": 5,
            "formatter": "json",
            "delay": True,
        },
    },
    "root": {
        "handlers": ["console"],
        "level": "INFO",
    },
    "loggers": {
        "django": {
            "handlers": ["console"],
            "level": os.environ.get("DJANGO_LOG_LEVEL", "INFO"),
            "propagate": False,
        },
        "storefront": {
            "handlers": ["console", "api_file"],
            "level": os.environ.get("STOREFRONT_LOG_LEVEL", "DEBUG"),
            "propagate": False,
        },
    },
}

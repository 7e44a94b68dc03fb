from __future__ import annotations

from pathlib import Path

from apps.core.config.env import get_runtime_settings

BASE_DIR = Path(__file__).resolve().parent.parent
RUNTIME = get_runtime_settings()

SECRET_KEY = RUNTIME.secret_key
DEBUG = RUNTIME.debug
ALLOWED_HOSTS = list(RUNTIME.allowed_hosts)

INSTALLED_APPS = [
    "django.contrib.contenttypes",
    "django.contrib.auth",
    "apps.core",
    "apps.tours",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "apps.core.middleware.RequestIdMiddleware",
    "apps.core.middleware.StructuredRequestLogMiddleware",
    "apps.core.error_handlers.UnifiedErrorMiddleware",
]

ROOT_URLCONF = "tourdesk.urls"

WSGI_APPLICATION = "tourdesk.wsgi.application"
ASGI_APPLICATION = "tourdesk.asgi.application"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": RUNTIME.db_path or BASE_DIR / ".local" / "tourdesk.sqlite3",
    }
}

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

APPEND_SLASH = False

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": "%(asctime)s %(levelname)s %(name)s %(message)s",
        }
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
        }
    },
    "loggers": {
        "tourdesk": {
            "handlers": ["console"],
            "level": "DEBUG" if DEBUG else "INFO",
            "propagate": False,
        }
    },
}

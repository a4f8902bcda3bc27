"""Django settings for the HR portal.

Every value that differs between deployments is read from the environment;
the defaults are suitable for local development only.
"""
from __future__ import annotations

import os
import tempfile
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


SECRET_KEY = os.environ.get("DJANGO_SECRET_KEY", "dev-only-hr-portal-secret-key")
DEBUG = _env_bool("DJANGO_DEBUG", True)
ALLOWED_HOSTS = [
    host.strip()
    for host in os.environ.get("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",")
    if host.strip()
]

INSTALLED_APPS = [
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "portal",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
    "portal.middleware.PortalContextMiddleware",
    "portal.middleware.StorageErrorMiddleware",
]

ROOT_URLCONF = "hr_portal.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.messages.context_processors.messages",
                "portal.context_processors.portal",
            ],
        },
    },
]

WSGI_APPLICATION = "hr_portal.wsgi.application"

# No relational database: every record lives in the portal blob storage.
DATABASES: dict = {}

# Sessions double as the per-browser local storage, so they must not need a database.
SESSION_ENGINE = "django.contrib.sessions.backends.file"
SESSION_FILE_PATH = os.environ.get("PORTAL_SESSION_DIR") or tempfile.gettempdir()
SESSION_COOKIE_AGE = 60 * 60 * 24 * 365
MESSAGE_STORAGE = "django.contrib.messages.storage.session.SessionStorage"

LANGUAGE_CODE = "en-us"
TIME_ZONE = os.environ.get("PORTAL_TIME_ZONE", "UTC")
USE_I18N = False
USE_TZ = True

# URL prefix the portal is mounted under; empty mounts it at the site root.
PORTAL_BASE_PATH = os.environ.get("PORTAL_BASE_PATH", "/").strip("/")

STATIC_URL = f"/{PORTAL_BASE_PATH}/static/" if PORTAL_BASE_PATH else "/static/"

PORTAL_STORAGE = {
    "BACKEND": os.environ.get("PORTAL_STORAGE_BACKEND", "portal.storage.SessionBlobStorage"),
    "OPTIONS": {},
}
if os.environ.get("PORTAL_STORAGE_DIR"):
    PORTAL_STORAGE["OPTIONS"]["directory"] = os.environ["PORTAL_STORAGE_DIR"]

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
        },
    },
    "loggers": {
        "portal": {
            "handlers": ["console"],
            "level": os.environ.get("PORTAL_LOG_LEVEL", "INFO"),
            "propagate": False,
        },
    },
}

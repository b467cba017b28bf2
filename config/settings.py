"""
TierSeal – Django Settings (Infrastructure Only)
==================================================
Django hosts the durable notification log (core.event_store).
TierSeal architecture is the authority — Django does not dictate structure.
The engine itself never imports Django; only the log and load_config do.
"""

import os
from pathlib import Path

# ── Paths ─────────────────────────────────────────────────────
BASE_DIR = Path(__file__).resolve().parent.parent

# ── Security ──────────────────────────────────────────────────
SECRET_KEY = os.environ.get("TIERSEAL_SECRET_KEY", "tierseal-dev-key-replace-before-deployment")

DEBUG = os.environ.get("TIERSEAL_DEBUG", "1") == "1"

ALLOWED_HOSTS = []

# ── Installed Apps ────────────────────────────────────────────
INSTALLED_APPS = [
    "django.contrib.contenttypes",
    "core.event_store",
]

# ── Database ──────────────────────────────────────────────────
# SQLite for development. Production DB configured separately.
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": os.environ.get("TIERSEAL_DB_PATH", str(BASE_DIR / "tierseal.sqlite3")),
    }
}

# ── Internationalization ──────────────────────────────────────
TIME_ZONE = "UTC"
USE_TZ = True

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# ── Engine ────────────────────────────────────────────────────
TIERSEAL = {
    "ADMIN": os.environ.get("TIERSEAL_ADMIN", "admin"),
    "REGISTRY_PRINCIPAL": os.environ.get("TIERSEAL_REGISTRY_PRINCIPAL", "tierseal.registry"),
    "TIER_COUNT": 3,
}

# ── Logging ───────────────────────────────────────────────────
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plain": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "plain"},
    },
    "loggers": {
        "tierseal": {
            "handlers": ["console"],
            "level": os.environ.get("TIERSEAL_LOG_LEVEL", "INFO"),
        },
    },
}

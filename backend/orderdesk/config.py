# backend/orderdesk/config.py
from __future__ import annotations
import os


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",  # optional alternative location
        "sqlite:///orderdesk.sqlite3",  # default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Listing defaults for /api/orders and /api/coupons
    DEFAULT_PER_PAGE = int(os.environ.get("DEFAULT_PER_PAGE", "20"))
    MAX_PER_PAGE = int(os.environ.get("MAX_PER_PAGE", "100"))

    # Retries for lock/deadlock failures inside workflow transactions
    DB_RETRY_ATTEMPTS = int(os.environ.get("DB_RETRY_ATTEMPTS", "3"))

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

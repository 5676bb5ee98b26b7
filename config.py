"""Configuration for the Tender Spring theme options admin."""
from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# Database
DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"sqlite+aiosqlite:///{Path(__file__).parent / 'tender_spring.db'}",
)
DATABASE_ECHO = os.getenv("DATABASE_ECHO", "").lower() in ("1", "true", "yes")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Theme options
THEME_NAME = os.getenv("THEME_NAME", "Tender Spring")
THEME_OPTIONS_NAME = "tenderSpring_theme_options"  # Option name the record is stored under
THEME_OPTIONS_GROUP = "tenderSpring_options"  # Settings group posted by the options form
THEME_OPTIONS_CAPABILITY = "edit_theme_options"  # Needed to view the page and to save the group

# Web auth (JWT secret, initial admin bootstrap)
JWT_SECRET = os.getenv("JWT_SECRET", "change-me-in-production-use-long-random-string")
JWT_ALGORITHM = "HS256"
JWT_EXPIRE_DAYS = 7
NONCE_LIFETIME_HOURS = 24  # Lifetime of the token embedded in admin forms
INITIAL_ADMIN_USERNAME = os.getenv("INITIAL_ADMIN_USERNAME", "admin")
INITIAL_ADMIN_PASSWORD = os.getenv("INITIAL_ADMIN_PASSWORD", "")  # Set to bootstrap first admin

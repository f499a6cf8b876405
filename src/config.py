"""Configuration module for the Internship Portal backend.

This module provides centralized configuration management, including directory
paths, API server settings, database location, and the business-rule constants
used by the domain managers. All configuration values can be overridden via
environment variables.
"""

import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# --- Directory Configuration ---

# Root directory of the project
ROOT_DIR = Path(__file__).parent.parent.resolve()

# Data directory name
DATA_DIR_NAME = "data"
DATA_DIR = Path(os.getenv("DATA_DIR", str(ROOT_DIR / DATA_DIR_NAME)))

# --- Database Configuration ---

DATABASE_URL: str = os.getenv(
    "DATABASE_URL", f"sqlite:///{DATA_DIR}/internship_portal.db"
)

# --- API Server Configuration ---

API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
API_PORT: int = int(os.getenv("API_PORT", "8000"))

# CORS allowed origins (comma-separated list)
# Default includes local development addresses. For production, set via
# CORS_ALLOWED_ORIGINS environment variable.
_CORS_ALLOWED_ORIGINS_STR: str = os.getenv(
    "CORS_ALLOWED_ORIGINS",
    "http://localhost:5173,http://127.0.0.1:5173,http://localhost:3000,"
    "http://127.0.0.1:3000,http://localhost:8080",
)
CORS_ALLOWED_ORIGINS: List[str] = [
    origin.strip()
    for origin in _CORS_ALLOWED_ORIGINS_STR.split(",")
    if origin.strip()
]

# --- Logging Configuration ---

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

# --- Authentication Configuration ---

# Tokens are issued by the external identity provider; we only verify them.
JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY", "your-secret-key-change-in-production")
JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")

# Admin token for admin registration (set via ADMIN_TOKEN environment variable)
ADMIN_TOKEN: Optional[str] = os.getenv("ADMIN_TOKEN")

# --- Internship Diary Configuration ---

# Days after creation during which the owner may still edit an entry
DIARY_EDIT_WINDOW_DAYS: int = int(os.getenv("DIARY_EDIT_WINDOW_DAYS", "7"))

# Entries packed into one diary week before the next week opens
DIARY_ENTRIES_PER_WEEK: int = int(os.getenv("DIARY_ENTRIES_PER_WEEK", "7"))

# --- Project Configuration ---

PROJECT_MAX_MEMBERS: int = int(os.getenv("PROJECT_MAX_MEMBERS", "5"))

# --- Student Code Configuration ---

# Generated codes look like FEST + course code + two digit year + sequence,
# e.g. FEST0126001
STUDENT_CODE_PREFIX: str = os.getenv("STUDENT_CODE_PREFIX", "FEST")
DEFAULT_COURSE_CODE: str = os.getenv("DEFAULT_COURSE_CODE", "01")

"""Configuration module for the Vocabulary Classroom service.

This module provides centralized configuration management, including directory
paths, API server settings, storage settings, and classroom rules.
All configuration values can be overridden via environment variables.
"""

import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# --- Directory Configuration ---

# Root directory of the project
ROOT_DIR = Path(__file__).parent.parent.resolve()

# Data directory name
DATA_DIR_NAME = "data"
DATA_DIR = ROOT_DIR / DATA_DIR_NAME

# --- API Server Configuration ---

API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
API_PORT: int = int(os.getenv("API_PORT", "8000"))

# CORS allowed origins (comma-separated list)
_CORS_ALLOWED_ORIGINS_STR: str = os.getenv(
    "CORS_ALLOWED_ORIGINS",
    "http://localhost:5173,http://127.0.0.1:5173,http://localhost:3000,"
    "http://127.0.0.1:3000",
)
CORS_ALLOWED_ORIGINS: List[str] = [
    origin.strip()
    for origin in _CORS_ALLOWED_ORIGINS_STR.split(",")
    if origin.strip()
]

# --- Database Configuration ---

DATABASE_URL: str = os.getenv(
    "DATABASE_URL", f"sqlite:///{DATA_DIR}/vocab_classroom.db"
)

# When disabled, every classroom lives in memory, even for signed-in users
DURABLE_STORE_ENABLED: bool = (
    os.getenv("DURABLE_STORE_ENABLED", "true").lower() == "true"
)

# --- Classroom Configuration ---

CLASSROOM_CODE_LENGTH: int = 4
CLASSROOM_CODE_ALPHABET: str = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"

# Bounded retries for durable code generation
CLASSROOM_CODE_MAX_ATTEMPTS: int = int(os.getenv("CLASSROOM_CODE_MAX_ATTEMPTS", "10"))

# Lifetime of anonymous (in-memory) classrooms
CLASSROOM_TTL_HOURS: int = int(os.getenv("CLASSROOM_TTL_HOURS", "24"))

# How often the background task purges expired in-memory classrooms
EXPIRY_SWEEP_INTERVAL_SECONDS: int = int(
    os.getenv("EXPIRY_SWEEP_INTERVAL_SECONDS", "600")
)

# Number of distinct classmates that must approve a word removal
REMOVE_WORD_VOTE_THRESHOLD: int = int(os.getenv("REMOVE_WORD_VOTE_THRESHOLD", "3"))

# A word counts as mastered when its accuracy reaches this ratio (0.0-1.0)
MASTERY_ACCURACY_THRESHOLD: float = float(
    os.getenv("MASTERY_ACCURACY_THRESHOLD", "0.8")
)

# Students seen within this window count as active on the owner dashboard
ACTIVE_STUDENT_WINDOW_HOURS: int = 24

# --- Kids Vocabulary Configuration ---

# Reports needed before a generated image is banned and regenerated
IMAGE_REPORT_BAN_THRESHOLD: int = int(os.getenv("IMAGE_REPORT_BAN_THRESHOLD", "3"))

# --- Upload Configuration ---

ALLOWED_WORD_FILE_EXTENSIONS: List[str] = [".txt", ".md", ".markdown", ".csv", ".pdf"]
MAX_UPLOAD_SIZE: int = int(os.getenv("MAX_UPLOAD_SIZE", str(10 * 1024 * 1024)))

# --- Authentication Configuration ---

JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY", "your-secret-key-change-in-production")
JWT_ALGORITHM: str = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7  # 7 days

# --- Logging Configuration ---

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
LOG_DIR = DATA_DIR / "logs"
LOG_FILE: str = os.getenv("LOG_FILE", "vocab_classroom.log")
LOG_TO_FILE: bool = os.getenv("LOG_TO_FILE", "true").lower() == "true"

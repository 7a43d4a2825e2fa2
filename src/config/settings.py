"""
Configuration settings for the Users procedure backend
"""

import os
import logging
from dotenv import load_dotenv

load_dotenv()

# Configure logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(level=getattr(logging, LOG_LEVEL, logging.INFO))
logger = logging.getLogger(__name__)


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# Environment configuration
ENV = os.getenv("ENV", "PROD")  # PROD or QA
DATABASE_URL = os.getenv("DATABASE_URL")
PORT = int(os.getenv("PORT", 8080))

# Connection pool configuration
DB_POOL_MIN_SIZE = int(os.getenv("DB_POOL_MIN_SIZE", 1))
DB_POOL_MAX_SIZE = int(os.getenv("DB_POOL_MAX_SIZE", 10))
DB_ACQUIRE_TIMEOUT = float(os.getenv("DB_ACQUIRE_TIMEOUT", 10))  # seconds
DB_COMMAND_TIMEOUT = float(os.getenv("DB_COMMAND_TIMEOUT", 60))  # seconds

# Run the contract-derived CREATE TABLE IF NOT EXISTS at startup
DB_AUTO_CREATE_SCHEMA = _env_bool("DB_AUTO_CREATE_SCHEMA", False)

# CORS settings
ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv("ALLOWED_ORIGINS", "http://localhost:3000").split(",")
    if origin.strip()
]


def validate_settings():
    """Validate settings required to open the database pool"""
    if not DATABASE_URL:
        raise ValueError("DATABASE_URL environment variable is required")
    if DB_POOL_MIN_SIZE > DB_POOL_MAX_SIZE:
        raise ValueError(
            f"DB_POOL_MIN_SIZE ({DB_POOL_MIN_SIZE}) cannot exceed DB_POOL_MAX_SIZE ({DB_POOL_MAX_SIZE})"
        )


logger.info(f"Environment: {ENV}")

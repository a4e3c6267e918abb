# config/settings.py
import os
import sys
from typing import List, Optional
from dotenv import load_dotenv
from pydantic import ValidationError, Field
from pydantic_settings import BaseSettings
from util.enums import Environment


if os.getenv("APP_ENV", Environment.DEV) == Environment.DEV:
    load_dotenv()


class Settings(BaseSettings):
    # App
    APP_ENV: str = Field(..., validation_alias="APP_ENV")
    REDIS_URL: str = Field(..., validation_alias="REDIS_URL")
    PERSISTENCE_TTL_SECONDS: int = Field(
        default=7 * 24 * 60 * 60, validation_alias="PERSISTENCE_TTL_SECONDS"
    )
    REDIS_HEALTH_CHECK_SECONDS: int = Field(
        default=30, validation_alias="REDIS_HEALTH_CHECK_SECONDS"
    )
    # Per-command socket timeout for store and archive calls.
    REDIS_SOCKET_TIMEOUT_SECONDS: float = Field(
        default=5.0, validation_alias="REDIS_SOCKET_TIMEOUT_SECONDS"
    )

    # CORS & Limits
    ALLOWED_ORIGIN: str = Field(..., validation_alias="ALLOWED_ORIGIN")
    RATE_LIMIT_TIMES: int = Field(default=30, validation_alias="RATE_LIMIT_TIMES")
    RATE_LIMIT_SECONDS: int = Field(default=60, validation_alias="RATE_LIMIT_SECONDS")
    TRUST_PROXY: bool = Field(default=False, validation_alias="TRUST_PROXY")

    # Upstream course service
    UPSTREAM_BASE_URL: str = Field(
        default="https://www.udemy.com", validation_alias="UPSTREAM_BASE_URL"
    )
    # Session is owned by the caller; we only forward it.
    UPSTREAM_COOKIE: Optional[str] = Field(default=None, validation_alias="UPSTREAM_COOKIE")
    UPSTREAM_TIMEOUT_SECONDS: float = Field(
        default=30.0, validation_alias="UPSTREAM_TIMEOUT_SECONDS"
    )
    CURRICULUM_PAGE_SIZE: int = 1000
    CAPTION_LOCALES: List[str] = ["en_US", "en"]

    # Throttle window applied before every upstream lookup
    THROTTLE_MIN_SECONDS: float = Field(default=0.5, validation_alias="THROTTLE_MIN_SECONDS")
    THROTTLE_MAX_SECONDS: float = Field(default=1.0, validation_alias="THROTTLE_MAX_SECONDS")

    # Archive
    ARCHIVE_COMPRESSION_LEVEL: int = 6
    FILENAME_MAX_LENGTH: int = 100

    # Logging knobs
    LOGGER_NAME: str = "transcript-dl"
    LOG_LEVEL: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    LOG_TO_FILE: bool = Field(default=False, validation_alias="LOG_TO_FILE")
    LOG_DIR: str = Field(default="logs", validation_alias="LOG_DIR")
    LOG_FILE_NAME: str = Field(default="app.log", validation_alias="LOG_FILE_NAME")
    LOG_MAX_BYTES: int = Field(
        default=20 * 1024 * 1024, validation_alias="LOG_MAX_BYTES"
    )
    LOG_BACKUP_COUNT: int = Field(default=5, validation_alias="LOG_BACKUP_COUNT")


try:
    settings = Settings()
except ValidationError as e:
    print("❌ Missing/invalid environment variables:", file=sys.stderr)
    for err in e.errors():
        loc = ".".join(str(x) for x in err.get("loc", []))
        msg = err.get("msg", "")
        print(f" - {loc}: {msg}", file=sys.stderr)
    sys.exit(1)
except Exception as e:
    print(f"❌ Settings initialization failed: {e}", file=sys.stderr)
    sys.exit(1)

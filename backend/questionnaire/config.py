"""Application settings and validation."""

import logging
import os
from pathlib import Path

logger = logging.getLogger("questionnaire.config")

BASE = Path(__file__).resolve().parent.parent
DEFAULT_DATABASE_URL = f"sqlite:///{BASE / 'questionnaire.db'}"


class Settings:
    ENV: str
    DATABASE_URL: str
    LOG_LEVEL: str
    ALLOW_DEV_CORS: bool
    REFERENCE_MAX_ATTEMPTS: int

    def __init__(self):
        self.ENV = os.getenv("ENV", "dev").lower()
        self.DATABASE_URL = os.getenv("DATABASE_URL", "")
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
        self.ALLOW_DEV_CORS = os.getenv("ALLOW_DEV_CORS", "true").lower() == "true"
        self.REFERENCE_MAX_ATTEMPTS = int(os.getenv("REFERENCE_MAX_ATTEMPTS", "5"))
        self._validate()

    def _validate(self):
        if not self.DATABASE_URL:
            if self.ENV != "dev":
                raise RuntimeError("DATABASE_URL must be set in non-dev environments")
            logger.warning("DATABASE_URL not set, using default %s", DEFAULT_DATABASE_URL)
            self.DATABASE_URL = DEFAULT_DATABASE_URL
        if self.REFERENCE_MAX_ATTEMPTS < 1:
            raise RuntimeError("REFERENCE_MAX_ATTEMPTS must be at least 1")


settings = Settings()

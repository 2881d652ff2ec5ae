"""
Application configuration management.

Supports environment-based configuration with sensible defaults.
"""

import os
from dataclasses import dataclass
from functools import lru_cache


@dataclass
class Config:
    """Application configuration container."""

    # Flask settings
    FLASK_ENV: str = "development"
    FLASK_DEBUG: bool = True
    SECRET_KEY: str = "dev-secret-key-change-in-production"

    # Redis settings
    REDIS_URL: str = "redis://localhost:6379/0"

    # Queue / worker settings
    QUEUE_NAME: str = "workflow_events"
    QUEUE_PROCESSING_TIMEOUT: int = 30  # Visibility timeout in seconds
    MAX_RETRIES: int = 3  # Delivery attempts before a message is dead-lettered

    # Engine settings
    ACTION_TIMEOUT_SECONDS: float = 5.0  # Per-action handler budget
    ACTIVE_TEMPLATES: str = ""  # Comma-separated template ids activated at start-up

    # Logging settings
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    @property
    def active_template_ids(self) -> list:
        return [t.strip() for t in self.ACTIVE_TEMPLATES.split(",") if t.strip()]

    @classmethod
    def from_env(cls) -> "Config":
        """Create configuration from environment variables."""
        return cls(
            FLASK_ENV=os.getenv("FLASK_ENV", cls.FLASK_ENV),
            FLASK_DEBUG=os.getenv("FLASK_DEBUG", "true").lower() == "true",
            SECRET_KEY=os.getenv("SECRET_KEY", cls.SECRET_KEY),
            REDIS_URL=os.getenv("REDIS_URL", cls.REDIS_URL),
            QUEUE_NAME=os.getenv("QUEUE_NAME", cls.QUEUE_NAME),
            QUEUE_PROCESSING_TIMEOUT=int(os.getenv("QUEUE_PROCESSING_TIMEOUT", cls.QUEUE_PROCESSING_TIMEOUT)),
            MAX_RETRIES=int(os.getenv("MAX_RETRIES", cls.MAX_RETRIES)),
            ACTION_TIMEOUT_SECONDS=float(os.getenv("ACTION_TIMEOUT_SECONDS", cls.ACTION_TIMEOUT_SECONDS)),
            ACTIVE_TEMPLATES=os.getenv("ACTIVE_TEMPLATES", cls.ACTIVE_TEMPLATES),
            LOG_LEVEL=os.getenv("LOG_LEVEL", cls.LOG_LEVEL),
            LOG_FORMAT=os.getenv("LOG_FORMAT", cls.LOG_FORMAT),
        )


@lru_cache(maxsize=1)
def get_config() -> Config:
    """Get cached configuration instance."""
    return Config.from_env()


@dataclass
class TestConfig(Config):
    """Configuration for testing environment."""

    FLASK_ENV: str = "testing"
    FLASK_DEBUG: bool = False
    REDIS_URL: str = "redis://localhost:6379/1"
    QUEUE_NAME: str = "workflow_events_test"
    ACTION_TIMEOUT_SECONDS: float = 1.0

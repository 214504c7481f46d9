# product_lifecycle_engine/initiative_engine/config.py

from typing import List, Optional
import logging
import sys

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv
from pythonjsonlogger.json import JsonFormatter

load_dotenv()

# Custom JSON formatter that excludes null/None fields
class CustomJsonFormatter(JsonFormatter):
    """Custom JSON formatter that only includes fields with non-None values."""

    def add_fields(self, log_record, record, message_dict):
        """Override to filter out None values before adding to JSON output."""
        super().add_fields(log_record, record, message_dict)

        log_record_copy = dict(log_record)
        for key, value in log_record_copy.items():
            if value is None:
                del log_record[key]


def setup_json_logging(log_level: int = logging.INFO) -> None:
    """Initialize JSON logging configuration for the engine."""
    handler = logging.StreamHandler(sys.stdout)

    # JSON formatter with common fields used across the engine
    formatter = CustomJsonFormatter(
        "%(asctime)s %(levelname)s %(name)s %(message)s "
        "%(initiative_id)s %(parent_id)s %(phase)s %(status)s "
        "%(from_phase)s %(to_phase)s %(from_status)s %(to_status)s "
        "%(count)s %(scanned)s %(repaired)s %(failed)s %(reason)s %(error)s"
    )

    handler.setFormatter(formatter)

    root_logger = logging.getLogger("initiative_engine")
    root_logger.setLevel(log_level)

    # Remove existing handlers to avoid duplicates
    root_logger.handlers = []

    root_logger.addHandler(handler)
    root_logger.propagate = False


class AnnouncementConfig(BaseModel):
    """Defaults for the calendar record emitted on finalize."""
    category: str = "Producto"
    source: str = "producto_module"


class Settings(BaseSettings):
    # App
    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"
    API_SHARED_SECRET: str = ""

    # Database
    DATABASE_URL: str = "sqlite:///./product_initiatives.db"

    # Lifecycle rules
    LIFECYCLE_DEFAULT_PERIOD_TYPE: str = "week"
    LIFECYCLE_DEFAULT_WINDOW_DAYS: int = 14  # discovery end date when only a start is given
    LIFECYCLE_OWNER_POLICY: str = "roster"  # "roster" | "presence"
    LIFECYCLE_DEFAULT_TAGS: List[str] = Field(default_factory=list)

    # Finalize side effect
    ANNOUNCEMENT: AnnouncementConfig = Field(default_factory=AnnouncementConfig)

    # Reconciliation sweep
    SWEEP_ON_BOARD_LOAD: bool = True
    SWEEP_LIMIT: Optional[int] = None

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_nested_delimiter="__",
        extra="ignore",
    )

    @field_validator("LIFECYCLE_DEFAULT_PERIOD_TYPE")
    @classmethod
    def validate_period_type(cls, v: str) -> str:
        if v not in ("week", "month"):
            raise ValueError("LIFECYCLE_DEFAULT_PERIOD_TYPE must be 'week' or 'month'")
        return v

    @field_validator("LIFECYCLE_OWNER_POLICY")
    @classmethod
    def validate_owner_policy(cls, v: str) -> str:
        v = (v or "").strip().lower()
        if v not in ("roster", "presence"):
            raise ValueError("LIFECYCLE_OWNER_POLICY must be 'roster' or 'presence'")
        return v

    @field_validator("LIFECYCLE_DEFAULT_WINDOW_DAYS")
    @classmethod
    def validate_window_days(cls, v: int) -> int:
        if v < 0:
            raise ValueError("LIFECYCLE_DEFAULT_WINDOW_DAYS must be >= 0")
        return v


settings = Settings()

"""
Run-level models: controller state, progress snapshots and log entries.
"""
import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import Field

from inci_scraper.models.product import CamelModel


class RunPhase(str, Enum):
    """Traversal controller states."""
    IDLE = "idle"
    FETCHING_BRAND_PAGES = "fetching_brand_pages"
    DISCOVERING_PRODUCTS = "discovering_products"
    SCRAPING_PRODUCTS = "scraping_products"
    COMPLETED = "completed"
    ABORTED = "aborted"

    @property
    def is_terminal(self) -> bool:
        return self in (RunPhase.COMPLETED, RunPhase.ABORTED)


class LogType(str, Enum):
    """Severity of a user-facing run log line."""
    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"


class Progress(CamelModel):
    """Progress snapshot; overwritten on every controller step."""

    current: int = 0
    total: int = 0
    phase: str = "Idle"


class LogEntry(CamelModel):
    """One user-facing run log line."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    type: LogType
    message: str

# src/crawler/model.py (Crawl Layer)
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field

from accessiscan.core.managers.config_manager import config_manager


class FetchedPage(BaseModel):
    """A successfully retrieved HTML page."""
    url: str
    final_url: str
    status_code: int
    content_type: Optional[str] = None
    content: str = ""
    elapsed_time: float = 0.0
    fetched_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class CrawlSettings(BaseModel):
    max_pages: int = Field(default=10, ge=1, description="Pages per full-site scan, seed included.")
    concurrency: int = Field(default=4, ge=1, description="Page fetches in flight during a full-site scan.")
    timeout: float = Field(default=15.0, gt=0, description="Hard per-fetch time budget in seconds.")
    max_redirects: int = Field(default=10, ge=0)
    check_broken_links: bool = False
    link_check_timeout: float = Field(default=10.0, gt=0)
    link_check_concurrency: int = Field(default=5, ge=1)
    link_check_max_links: int = Field(default=50, ge=0)

    @classmethod
    def from_config(cls, **overrides) -> "CrawlSettings":
        """Settings from the loaded configuration; keyword overrides win."""
        values = {
            "max_pages": config_manager.get_nested("session.max_pages", 10),
            "concurrency": config_manager.get_nested("session.concurrency", 4),
            "timeout": config_manager.get_nested("session.time_out", 15),
            "max_redirects": config_manager.get_nested("session.max_redirects", 10),
            "check_broken_links": config_manager.get_nested("scanner.check_broken_links", False),
            "link_check_timeout": config_manager.get_nested("link_checker.timeout", 10),
            "link_check_concurrency": config_manager.get_nested("link_checker.concurrency", 5),
            "link_check_max_links": config_manager.get_nested("link_checker.max_links", 50),
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)

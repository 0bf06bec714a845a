# src/auditor/dom/models.py
from typing import List, Dict

from pydantic import BaseModel, ConfigDict, Field

from .core import ElementRecord

# Categories filled by the extraction passes, in report order.
CATEGORIES = ("images", "links", "buttons", "headings", "interactive")


class ExtractedDocument(BaseModel):
    """
    Element records extracted from one page.

    Each category holds its records in document order. `link_status` maps
    absolute link targets to HTTP status codes and is only filled when the
    broken-link check is enabled for the scan.
    """
    model_config = ConfigDict(frozen=True)

    url: str
    images: List[ElementRecord] = Field(default_factory=list)
    links: List[ElementRecord] = Field(default_factory=list)
    buttons: List[ElementRecord] = Field(default_factory=list)
    headings: List[ElementRecord] = Field(default_factory=list)
    interactive: List[ElementRecord] = Field(default_factory=list)
    link_status: Dict[str, int] = Field(default_factory=dict)

    @property
    def element_count(self) -> int:
        return sum(len(getattr(self, category)) for category in CATEGORIES)

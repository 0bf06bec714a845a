# src/auditor/dom/builder.py
import logging
import re
from typing import Dict, List, Optional

from .models import ExtractedDocument, CATEGORIES
from .core import ElementRecord
from .registry import DOMRegistry

logger = logging.getLogger(__name__)

_COMMENT_PATTERN = re.compile(r'<!--[\s\S]*?(?:-->|$)')
# Raw-text containers: markup-looking strings inside them are not elements.
# An unclosed container runs to the end of the document.
_RAW_TEXT_PATTERN = re.compile(
    r'(<(script|style|template)(?=[\s/>])[^>]*>)[\s\S]*?(</\2\s*>|\Z)',
    re.IGNORECASE
)


class DOMBuilder:
    """
    Builder responsible for turning raw HTML into an ExtractedDocument.

    There is no parse tree: every element category is filled by its own
    pattern passes over the full text, so malformed markup in one region
    cannot abort the extraction of the other categories.
    """

    def __init__(self):
        """Initializes the builder and ensures the DOMRegistry is populated."""
        DOMRegistry.discover()

    def parse_doc(
            self,
            url: str,
            html: Optional[str],
            link_status: Optional[Dict[str, int]] = None
    ) -> ExtractedDocument:
        """
        Parses raw HTML content into an ExtractedDocument.

        Args:
            url (str): The URL of the page being parsed.
            html (str): The raw HTML string.
            link_status (Optional[Dict[str, int]]): Absolute link targets mapped to
                                                    HTTP status codes, for the broken-link check.

        Returns:
            ExtractedDocument: The element records of the page, per category.
        """
        if not html:
            return ExtractedDocument(url=url, link_status=link_status or {})

        clean_html = self._strip_non_content(html.replace('\ufeff', ''))

        categories = {
            category: self._extract_category(category, clean_html, url)
            for category in CATEGORIES
        }
        doc = ExtractedDocument(url=url, link_status=link_status or {}, **categories)

        logger.debug(
            "Extracted %d elements from %s (%s)", doc.element_count, url,
            ", ".join(f"{name}={len(records)}" for name, records in categories.items())
        )
        return doc

    @staticmethod
    def _strip_non_content(html: str) -> str:
        """Removes comments and empties script/style/template bodies."""
        html = _COMMENT_PATTERN.sub("", html)
        return _RAW_TEXT_PATTERN.sub(r'\1\3', html)

    @staticmethod
    def _extract_category(category: str, html: str, url: str) -> List[ElementRecord]:
        """
        Runs every extraction pass registered for a category and merges the
        records into document order. A failing pass is logged and contributes nothing.
        """
        records: List[ElementRecord] = []
        for extractor in DOMRegistry.get_extractors(category):
            try:
                records.extend(extractor(html))
            except Exception as e:
                logger.error(f"Extraction pass {extractor.__name__} failed on {url}: {e}", exc_info=True)

        # sort() is stable: passes keep their relative order on equal offsets
        records.sort(key=lambda record: record.position)
        return records

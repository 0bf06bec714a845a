# src/auditor/dom/qngine.py
import logging
from typing import List

from auditor.model import AccessibilityIssue
from .models import ExtractedDocument
from .registry import DOMRegistry

logger = logging.getLogger(__name__)


class QNGINE:
    """
    Quality Engine (QNGINE) for auditing extracted documents.

    Feeds each registered rule the document fields it declared and
    concatenates the findings in the fixed rule order. Rules share no state,
    so the result only depends on the document.
    """

    def __init__(self):
        """Initializes the engine by discovering and loading all available audit rules."""
        DOMRegistry.discover()
        self.rules = DOMRegistry.get_all_rules()

    def run_audit(self, doc: ExtractedDocument) -> List[AccessibilityIssue]:
        """
        Runs the full audit suite on an ExtractedDocument.

        Args:
            doc (ExtractedDocument): The element records of one page.

        Returns:
            List[AccessibilityIssue]: Findings, grouped by rule in reporting order.
        """
        findings: List[AccessibilityIssue] = []
        for rule in self.rules:
            args = [getattr(doc, field) for field in rule.inputs]
            results = rule(*args)
            if results:
                logger.debug(f"{rule.__name__}: {len(results)} issue(s) on {doc.url}")
                findings.extend(results)
        return findings

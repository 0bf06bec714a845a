# src/auditor/dom/registry.py
import importlib
import pkgutil
import logging
from typing import Dict, List

from auditor.model import IssueType
from .core import ElementDefinition, AuditRule, Extractor

logger = logging.getLogger(__name__)


class DOMRegistry:
    """
    Central registry for extraction passes and audit rules.

    Dynamically discovers the ElementDefinition modules in the
    'auditor.dom.elements' package. Registration happens once per process;
    afterwards the registry is only read, so concurrent scans can share it.
    """

    _extractors: Dict[str, List[Extractor]] = {}
    _audit_rules: List[AuditRule] = []
    _loaded: bool = False

    @classmethod
    def discover(cls) -> None:
        """
        Registers all element definitions found in the 'auditor.dom.elements' package.

        Rules are ordered by IssueType declaration order (alt text, empty links,
        accessible names, headings, keyboard, broken links). Rules sharing a type
        keep their module order.
        """
        if cls._loaded:
            return

        import auditor.dom.elements as elements_pkg

        extractors: Dict[str, List[Extractor]] = {}
        rules: List[AuditRule] = []

        for _, name, _ in sorted(pkgutil.iter_modules(elements_pkg.__path__), key=lambda m: m.name):
            full_name = f"auditor.dom.elements.{name}"
            module = importlib.import_module(full_name)
            defn = getattr(module, "DEFINITION", None)
            if not isinstance(defn, ElementDefinition):
                logger.debug(f"Skipping {full_name}: no DEFINITION")
                continue

            if defn.category:
                extractors.setdefault(defn.category, []).extend(defn.extractors)
            rules.extend(defn.audit_rules)
            logger.debug(f"Element definition loaded: {defn.name}")

        type_order = list(IssueType)
        rules.sort(key=lambda rule: type_order.index(rule.issue_type))

        cls._extractors = extractors
        cls._audit_rules = rules
        cls._loaded = True

    @classmethod
    def get_extractors(cls, category: str) -> List[Extractor]:
        """Retrieves the extraction passes that fill a document category."""
        return list(cls._extractors.get(category, []))

    @classmethod
    def get_all_rules(cls) -> List[AuditRule]:
        """Returns all registered audit rules in reporting order."""
        return list(cls._audit_rules)

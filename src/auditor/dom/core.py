import html
import re
from types import MappingProxyType
from typing import List, Callable, Mapping, Optional, Tuple, Sequence

from pydantic import BaseModel, ConfigDict, Field, field_validator

from auditor.model import IssueType, AccessibilityIssue

SNIPPET_MAX_LENGTH = 150
SNIPPET_ELLIPSIS = "..."

# Quote-aware attribute section of a start tag: a '>' inside a quoted value does not end the tag.
ATTRS_PATTERN = r'''((?:[^>"']|"[^"]*"|'[^']*')*)'''

_TAG_PATTERN = re.compile(r'<[^>]*>')
_WHITESPACE_PATTERN = re.compile(r'\s+')
_CHILD_TAG_PATTERN = re.compile(r'<([a-zA-Z][a-zA-Z0-9-]*)')


def audit_spec(issue_type: IssueType, inputs: Sequence[str]):
    """
    Decorator declaring which issue type a rule emits and which
    ExtractedDocument fields it consumes, in argument order.
    Facilitates auto-discovery by the DOMRegistry.
    """
    def decorator(func):
        func.issue_type = issue_type
        func.inputs = tuple(inputs)
        return func
    return decorator


class ElementRecord(BaseModel):
    """
    Immutable record of one matched element. Produced by the extraction
    passes and consumed only by audit rules.
    """
    model_config = ConfigDict(frozen=True)

    tag: str
    attributes: Mapping[str, str] = Field(default_factory=dict, validate_default=True)
    text_content: str = ""
    source_snippet: str = ""
    position: int = 0
    level: Optional[int] = None
    child_tags: Tuple[str, ...] = ()

    @field_validator("attributes", mode="after")
    @classmethod
    def _freeze_attributes(cls, value: Mapping[str, str]) -> Mapping[str, str]:
        return MappingProxyType(dict(value))

    @property
    def label(self) -> str:
        """Tag label used in issue reports, e.g. '<img>'."""
        return f"<{self.tag}>"

    def has_attr_value(self, *names: str) -> bool:
        """True if any of the given attributes is present with a non-empty value."""
        return any(self.attributes.get(name) for name in names)


# A rule consumes the document fields named in its `inputs` and returns issues.
AuditRule = Callable[..., List[AccessibilityIssue]]
Extractor = Callable[[str], List[ElementRecord]]


class ElementDefinition:
    """
    Configuration object binding a document category to the extraction
    passes that fill it and the audit rules that read from it.
    """

    def __init__(
            self,
            name: str,
            category: Optional[str] = None,
            extractors: Optional[List[Extractor]] = None,
            audit_rules: Optional[List[AuditRule]] = None,
    ):
        self.name = name
        self.category = category
        self.extractors = extractors or []
        self.audit_rules = audit_rules or []

        for rule in self.audit_rules:
            if not hasattr(rule, "issue_type"):
                raise ValueError(f"Rule {rule.__name__} in '{name}' is missing @audit_spec")

        self.issue_types = sorted({rule.issue_type for rule in self.audit_rules}, key=_issue_order)


def _issue_order(issue_type: IssueType) -> int:
    return list(IssueType).index(issue_type)


# --- Text helpers shared by the extraction passes ---

def truncate_snippet(markup: str, max_length: int = SNIPPET_MAX_LENGTH) -> str:
    if len(markup) <= max_length:
        return markup
    return markup[:max_length] + SNIPPET_ELLIPSIS


def normalize_text(inner_html: str) -> str:
    """Strips nested tags, decodes entities and collapses whitespace."""
    text = _TAG_PATTERN.sub(" ", inner_html)
    text = html.unescape(text)
    return _WHITESPACE_PATTERN.sub(" ", text).strip()


def find_child_tags(inner_html: str) -> Tuple[str, ...]:
    """Lower-cased names of the element tags opened inside a fragment, in order."""
    return tuple(name.lower() for name in _CHILD_TAG_PATTERN.findall(inner_html))


def tag_pattern(names: str, closed: bool) -> re.Pattern:
    """
    Builds a case-insensitive matcher for the given tag name alternation.
    Group 1 is the tag name, group 2 the raw attributes and, when `closed`
    is set, group 3 the inner markup up to the matching end tag. The inner
    markup never spans another start tag of the same name, so an unclosed
    element gives up at the next one instead of scanning to the end of the page.
    """
    start = rf'<({names})(?=[\s/>]){ATTRS_PATTERN}>'
    if closed:
        return re.compile(start + r'((?:(?!<\1[\s/>])[\s\S])*?)</\1\s*>', re.IGNORECASE)
    return re.compile(start, re.IGNORECASE)


def clean_attr_string(raw: str) -> str:
    """Drops the self-closing slash from a void element's attribute section."""
    raw = raw.rstrip()
    return raw[:-1] if raw.endswith("/") else raw

from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Optional, List, Dict, Any, Iterable
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class IssueType(str, Enum):
    """
    Closed set of issue categories. Declaration order is the order in which
    the engine runs and reports the rule groups.
    """
    MISSING_ALT_TEXT = "missing_alt_text"
    EMPTY_LINK = "empty_link"
    MISSING_ARIA_LABEL = "missing_aria_label"
    HEADING_HIERARCHY = "heading_hierarchy"
    KEYBOARD_INACCESSIBLE = "keyboard_inaccessible"
    BROKEN_LINK = "broken_link"


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class ScanMode(str, Enum):
    SINGLE = "single"
    FULL = "full"


# Label/description per issue type, shared read-only by the engine and the reports.
ISSUE_TYPE_INFO = MappingProxyType({
    IssueType.MISSING_ALT_TEXT: MappingProxyType({
        "label": "Missing Alt Text",
        "description": "Images without alternative text are inaccessible to screen reader users",
    }),
    IssueType.EMPTY_LINK: MappingProxyType({
        "label": "Empty Links",
        "description": "Links without text content make navigation difficult for screen readers",
    }),
    IssueType.MISSING_ARIA_LABEL: MappingProxyType({
        "label": "Missing ARIA Labels",
        "description": "Interactive elements without accessible names are hard to identify",
    }),
    IssueType.HEADING_HIERARCHY: MappingProxyType({
        "label": "Heading Hierarchy",
        "description": "Incorrect heading order makes page structure confusing for assistive technologies",
    }),
    IssueType.KEYBOARD_INACCESSIBLE: MappingProxyType({
        "label": "Keyboard Navigation",
        "description": "Elements that cannot receive focus block keyboard-only users",
    }),
    IssueType.BROKEN_LINK: MappingProxyType({
        "label": "Broken Links",
        "description": "Links that lead nowhere create a poor user experience",
    }),
})

# The five rule groups counted by passed_checks. Broken links are opt-in and
# reported without taking part in the pass tally.
CORE_ISSUE_TYPES = frozenset({
    IssueType.MISSING_ALT_TEXT,
    IssueType.EMPTY_LINK,
    IssueType.MISSING_ARIA_LABEL,
    IssueType.HEADING_HIERARCHY,
    IssueType.KEYBOARD_INACCESSIBLE,
})
CHECKS_PERFORMED = len(CORE_ISSUE_TYPES)


class ReportModel(BaseModel):
    """Frozen base for report models, serialized with camelCase keys."""
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=False,
    )


class AccessibilityIssue(ReportModel):
    """
    A single finding produced by a rule at detection time.
    The id is generated fresh for every issue and never reused across scans.
    """
    id: UUID = Field(default_factory=uuid4)
    type: IssueType
    severity: Severity
    element: str  # tag label, e.g. '<img>'
    description: str
    wcag_reference: str
    code_snippet: str

    @classmethod
    def create(
            cls,
            issue_type: IssueType,
            severity: Severity,
            element: str,
            description: str,
            wcag_reference: str,
            code_snippet: str,
    ) -> "AccessibilityIssue":
        return cls(
            type=issue_type,
            severity=severity,
            element=element,
            description=description,
            wcag_reference=wcag_reference,
            code_snippet=code_snippet,
        )

    def fingerprint(self) -> tuple:
        """All fields except the id; equal for the same finding in repeated runs."""
        return (
            self.type, self.severity, self.element,
            self.description, self.wcag_reference, self.code_snippet
        )


def _count(issues: Iterable[AccessibilityIssue], severity: Severity) -> int:
    return sum(1 for issue in issues if issue.severity == severity)


class PageResult(ReportModel):
    """Issues and totals for one fetched page."""
    url: str
    issues: List[AccessibilityIssue] = Field(default_factory=list)
    total_issues: int = 0
    error_count: int = 0
    warning_count: int = 0

    @classmethod
    def build(cls, url: str, issues: Iterable[AccessibilityIssue]) -> "PageResult":
        issues = list(issues)
        return cls(
            url=url,
            issues=issues,
            total_issues=len(issues),
            error_count=_count(issues, Severity.ERROR),
            warning_count=_count(issues, Severity.WARNING),
        )


class ScanResult(ReportModel):
    """
    Aggregated report for one scan invocation.

    Built once through `from_pages`, which keeps
    total_issues == error_count + warning_count == len(issues).
    """
    url: str
    scanned_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    scan_mode: ScanMode = ScanMode.SINGLE
    pages_scanned: int = 1
    total_issues: int = 0
    error_count: int = 0
    warning_count: int = 0
    passed_checks: int = CHECKS_PERFORMED
    issues: List[AccessibilityIssue] = Field(default_factory=list)
    page_results: Optional[List[PageResult]] = None

    @classmethod
    def from_pages(cls, url: str, mode: ScanMode, pages: List[PageResult]) -> "ScanResult":
        """
        Merges page results in page-discovery order. passed_checks is a global
        assessment: a rule group only passes if no page triggered it.
        """
        issues = [issue for page in pages for issue in page.issues]
        failed_groups = {issue.type for issue in issues if issue.type in CORE_ISSUE_TYPES}

        return cls(
            url=url,
            scan_mode=mode,
            pages_scanned=len(pages),
            total_issues=len(issues),
            error_count=sum(page.error_count for page in pages),
            warning_count=sum(page.warning_count for page in pages),
            passed_checks=max(0, CHECKS_PERFORMED - len(failed_groups)),
            issues=issues,
            page_results=pages if mode == ScanMode.FULL and len(pages) > 1 else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready dict; pageResults is omitted unless present."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ScanRequest(BaseModel):
    """Inbound scan request as received by the HTTP API."""
    url: str
    mode: ScanMode = ScanMode.SINGLE

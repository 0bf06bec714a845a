from typing import List

from auditor.model import AccessibilityIssue, IssueType, Severity
from ..attributes import parse_attributes
from ..core import (
    ElementRecord, ElementDefinition, audit_spec,
    tag_pattern, truncate_snippet, normalize_text, find_child_tags
)

# h1..h6 only; the end tag must close the same level.
HEADING_PATTERN = tag_pattern("h[1-6]", closed=True)

WCAG_STRUCTURE = "1.3.1 Info and Relationships"


def extract_headings(markup: str) -> List[ElementRecord]:
    """
    Parses heading tags and determines their hierarchy level (e.g., h1 -> 1).
    """
    records = []
    for match in HEADING_PATTERN.finditer(markup):
        tag = match.group(1).lower()
        records.append(ElementRecord(
            tag=tag,
            attributes=parse_attributes(match.group(2)),
            text_content=normalize_text(match.group(3)),
            source_snippet=truncate_snippet(match.group(0)),
            position=match.start(),
            level=int(tag[1]),
            child_tags=find_child_tags(match.group(3)),
        ))
    return records


# --- AUDIT RULES ---

@audit_spec(issue_type=IssueType.HEADING_HIERARCHY, inputs=["headings"])
def check_first_heading(headings: List[ElementRecord]) -> List[AccessibilityIssue]:
    """Rule: the outline should start with an h1."""
    if not headings or headings[0].level == 1:
        return []

    first = headings[0]
    return [AccessibilityIssue.create(
        IssueType.HEADING_HIERARCHY,
        Severity.WARNING,
        first.label,
        f"Page should start with an h1 heading. Found {first.tag.upper()} instead.",
        WCAG_STRUCTURE,
        first.source_snippet
    )]


@audit_spec(issue_type=IssueType.HEADING_HIERARCHY, inputs=["headings"])
def check_multiple_h1(headings: List[ElementRecord]) -> List[AccessibilityIssue]:
    """Rule: one main h1 per page. Reported once, naming the count."""
    h1_count = sum(1 for heading in headings if heading.level == 1)
    if h1_count <= 1:
        return []

    return [AccessibilityIssue.create(
        IssueType.HEADING_HIERARCHY,
        Severity.WARNING,
        "<h1>",
        f"Page has {h1_count} h1 headings. Consider using only one main h1 per page.",
        WCAG_STRUCTURE,
        f"Multiple h1 elements found ({h1_count} total)"
    )]


@audit_spec(issue_type=IssueType.HEADING_HIERARCHY, inputs=["headings"])
def check_heading_skips(headings: List[ElementRecord]) -> List[AccessibilityIssue]:
    """Rule: a heading may go at most one level deeper than the one before it."""
    res = []
    for previous, current in zip(headings, headings[1:]):
        if current.level > previous.level + 1:
            res.append(AccessibilityIssue.create(
                IssueType.HEADING_HIERARCHY,
                Severity.WARNING,
                current.label,
                f"Heading level skips from h{previous.level} to h{current.level}. "
                f"This creates confusion for screen reader users.",
                WCAG_STRUCTURE,
                current.source_snippet
            ))
    return res


# --- ELEMENT DEFINITION ---

DEFINITION = ElementDefinition(
    name="heading",
    category="headings",
    extractors=[extract_headings],
    audit_rules=[check_first_heading, check_multiple_h1, check_heading_skips]
)

import html
from typing import List, Dict

from auditor.model import AccessibilityIssue, IssueType, Severity
from crawler.utils.url_utils import UrlUtils
from ..attributes import parse_attributes
from ..core import (
    ElementRecord, ElementDefinition, audit_spec,
    tag_pattern, truncate_snippet, normalize_text, find_child_tags
)

ANCHOR_PATTERN = tag_pattern("a", closed=True)

NAME_ATTRIBUTES = ("aria-label", "aria-labelledby", "title")
NON_NAVIGABLE_PREFIXES = ('#', 'mailto:', 'tel:', 'javascript:', 'data:')

# Status codes that definitively mean the target is gone
GONE_STATUSES = (404, 410)


def extract_links(markup: str) -> List[ElementRecord]:
    """Parses every <a>...</a> pair into a link record."""
    records = []
    for match in ANCHOR_PATTERN.finditer(markup):
        inner = match.group(3)
        records.append(ElementRecord(
            tag="a",
            attributes=parse_attributes(match.group(2)),
            text_content=normalize_text(inner),
            source_snippet=truncate_snippet(match.group(0)),
            position=match.start(),
            child_tags=find_child_tags(inner),
        ))
    return records


def resolve_href(link: ElementRecord, base_url: str) -> str:
    """
    Normalized absolute target URL of a link, or "" when the link does not
    point to a navigable http(s) resource.
    """
    href = html.unescape(link.attributes.get("href", "")).strip()
    if not href or href.lower().startswith(NON_NAVIGABLE_PREFIXES):
        return ""
    try:
        target = UrlUtils.normalize_url(base_url, href)
    except ValueError:
        return ""
    return target if UrlUtils.is_valid_absolute_url(target) else ""


# --- AUDIT RULES ---

@audit_spec(issue_type=IssueType.EMPTY_LINK, inputs=["links"])
def check_empty_links(links: List[ElementRecord]) -> List[AccessibilityIssue]:
    """A link needs visible text, an accessible-name attribute or an image inside it."""
    res = []
    for link in links:
        if link.text_content or link.has_attr_value(*NAME_ATTRIBUTES):
            continue
        if "img" in link.child_tags:
            continue
        res.append(AccessibilityIssue.create(
            IssueType.EMPTY_LINK,
            Severity.ERROR,
            link.label,
            "Link has no accessible text. Screen readers cannot convey the link's purpose.",
            "2.4.4 Link Purpose",
            link.source_snippet
        ))
    return res


@audit_spec(issue_type=IssueType.BROKEN_LINK, inputs=["url", "links", "link_status"])
def check_broken_links(
        url: str, links: List[ElementRecord], link_status: Dict[str, int]
) -> List[AccessibilityIssue]:
    """
    Reports links whose checked target failed. Only runs when the scan
    collected link statuses; an empty status map yields no issues.
    """
    res = []
    if not link_status:
        return res

    for link in links:
        target = resolve_href(link, url)
        status = link_status.get(target)
        if status is None or 0 <= status < 400:
            continue

        if status < 0:
            severity = Severity.WARNING
            description = f"Link target could not be reached: {target}"
        elif status in GONE_STATUSES:
            severity = Severity.ERROR
            description = f"Link target not found ({status}): {target}"
        else:
            severity = Severity.WARNING
            description = f"Link target returned error ({status}): {target}"

        res.append(AccessibilityIssue.create(
            IssueType.BROKEN_LINK,
            severity,
            link.label,
            description,
            "2.4.4 Link Purpose",
            link.source_snippet
        ))
    return res


# --- ELEMENT DEFINITION ---

DEFINITION = ElementDefinition(
    name="link",
    category="links",
    extractors=[extract_links],
    audit_rules=[check_empty_links, check_broken_links]
)

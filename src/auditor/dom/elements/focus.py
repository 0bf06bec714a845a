import re
from typing import List, Optional

from auditor.model import AccessibilityIssue, IssueType, Severity
from ..core import ElementRecord, ElementDefinition, audit_spec
from .control import ICON_BUTTON_TAG

_INTEGER_PATTERN = re.compile(r'^[+-]?\d+$')


def parse_tabindex(raw: Optional[str]) -> Optional[int]:
    """Integer value of a tabindex attribute, or None when absent or non-numeric."""
    if raw is None:
        return None
    raw = raw.strip()
    if not _INTEGER_PATTERN.match(raw):
        return None
    return int(raw)


# --- RULES ---

@audit_spec(issue_type=IssueType.KEYBOARD_INACCESSIBLE, inputs=["links", "buttons", "interactive"])
def check_positive_tabindex(
        links: List[ElementRecord],
        buttons: List[ElementRecord],
        interactive: List[ElementRecord]
) -> List[AccessibilityIssue]:
    """
    A positive tabindex pulls an element out of the natural tab order.
    0 and negative values are fine; non-numeric values are ignored.
    Icon-button records duplicate an anchor or button already in the
    other categories, so they are skipped here.
    """
    elements = [el for el in interactive if el.tag != ICON_BUTTON_TAG]
    elements.extend(links)
    elements.extend(buttons)
    elements.sort(key=lambda el: el.position)

    res = []
    for element in elements:
        value = parse_tabindex(element.attributes.get("tabindex"))
        if value is None or value <= 0:
            continue
        res.append(AccessibilityIssue.create(
            IssueType.KEYBOARD_INACCESSIBLE,
            Severity.WARNING,
            element.label,
            f"Element has positive tabindex ({value}). This disrupts natural tab order.",
            "2.4.3 Focus Order",
            element.source_snippet
        ))
    return res


# --- DEFINITION ---
# No extraction pass of its own: reads the categories filled by the other definitions.
DEFINITION = ElementDefinition(
    name="focus",
    audit_rules=[check_positive_tabindex]
)

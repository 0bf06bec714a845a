import re
from typing import List

from auditor.model import AccessibilityIssue, IssueType, Severity
from ..attributes import parse_attributes
from ..core import (
    ElementRecord, ElementDefinition, audit_spec,
    tag_pattern, truncate_snippet, normalize_text, find_child_tags, clean_attr_string
)

INPUT_PATTERN = tag_pattern("input", closed=False)
LIST_CONTROL_PATTERN = tag_pattern("select|textarea", closed=True)
CLICKABLE_PATTERN = tag_pattern("a|button", closed=True)

# Icon fonts (<i>), inline vector graphics (<svg>) or any element with 'icon' in its class
ICON_CHILD_PATTERN = re.compile(
    r'''<(?:svg|i)(?=[\s/>])|<[a-z][a-z0-9-]*\s(?:[^>"']|"[^"]*"|'[^']*')*?\bclass\s*=\s*["'][^"']*icon''',
    re.IGNORECASE
)

NON_TEXT_INPUT_TYPES = ("hidden", "button", "submit", "reset")
NAME_ATTRIBUTES = ("aria-label", "aria-labelledby", "title")
FORM_CONTROL_TAGS = ("input", "select", "textarea")
ICON_BUTTON_TAG = "icon-button"


def extract_form_controls(markup: str) -> List[ElementRecord]:
    """Text-like inputs, selects and textareas, in the order of the two passes."""
    records = []
    for match in INPUT_PATTERN.finditer(markup):
        attrs = parse_attributes(clean_attr_string(match.group(2)))
        input_type = attrs.get("type", "").strip().lower() or "text"
        if input_type in NON_TEXT_INPUT_TYPES:
            continue
        records.append(ElementRecord(
            tag="input",
            attributes=attrs,
            source_snippet=truncate_snippet(match.group(0)),
            position=match.start(),
        ))

    for match in LIST_CONTROL_PATTERN.finditer(markup):
        records.append(ElementRecord(
            tag=match.group(1).lower(),
            attributes=parse_attributes(match.group(2)),
            source_snippet=truncate_snippet(match.group(0)),
            position=match.start(),
        ))
    return records


def extract_icon_controls(markup: str) -> List[ElementRecord]:
    """
    Buttons and anchors whose only content is an icon and which carry no
    accessible name at all. Emitted as synthetic 'icon-button' records.
    """
    records = []
    for match in CLICKABLE_PATTERN.finditer(markup):
        inner = match.group(3)
        attrs = parse_attributes(match.group(2))

        if normalize_text(inner) or any(attrs.get(name) for name in NAME_ATTRIBUTES):
            continue
        child_tags = find_child_tags(inner)
        if "img" in child_tags or not ICON_CHILD_PATTERN.search(inner):
            continue

        records.append(ElementRecord(
            tag=ICON_BUTTON_TAG,
            attributes=attrs,
            source_snippet=truncate_snippet(match.group(0)),
            position=match.start(),
            child_tags=child_tags,
        ))
    return records


# --- RULES ---

@audit_spec(issue_type=IssueType.MISSING_ARIA_LABEL, inputs=["interactive"])
def check_control_names(controls: List[ElementRecord]) -> List[AccessibilityIssue]:
    """
    Icon-only controls are always reported (they were filtered at extraction).
    Form controls only need some hook for a label: an id a <label for> can
    point at, an ARIA name, a title or, as a last resort, a placeholder.
    """
    res = []
    for control in controls:
        if control.tag == ICON_BUTTON_TAG:
            res.append(AccessibilityIssue.create(
                IssueType.MISSING_ARIA_LABEL,
                Severity.ERROR,
                control.label,
                "Icon-only button lacks accessible text. Add aria-label or visually hidden text.",
                "4.1.2 Name, Role, Value",
                control.source_snippet
            ))
        elif control.tag in FORM_CONTROL_TAGS:
            if control.has_attr_value("id", *NAME_ATTRIBUTES, "placeholder"):
                continue
            res.append(AccessibilityIssue.create(
                IssueType.MISSING_ARIA_LABEL,
                Severity.WARNING,
                control.label,
                "Form control has no associated label. Users may not understand its purpose.",
                "1.3.1 Info and Relationships",
                control.source_snippet
            ))
    return res


# --- DEFINITION ---
DEFINITION = ElementDefinition(
    name="control",
    category="interactive",
    extractors=[extract_form_controls, extract_icon_controls],
    audit_rules=[check_control_names]
)

from typing import List

from auditor.model import AccessibilityIssue, IssueType, Severity
from ..attributes import parse_attributes
from ..core import (
    ElementRecord, ElementDefinition, audit_spec,
    tag_pattern, truncate_snippet, normalize_text, find_child_tags, clean_attr_string
)

BUTTON_PATTERN = tag_pattern("button", closed=True)
INPUT_PATTERN = tag_pattern("input", closed=False)

BUTTON_INPUT_TYPES = ("button", "submit", "reset")
NAME_ATTRIBUTES = ("aria-label", "aria-labelledby", "title")


def extract_buttons(markup: str) -> List[ElementRecord]:
    return [
        ElementRecord(
            tag="button",
            attributes=parse_attributes(match.group(2)),
            text_content=normalize_text(match.group(3)),
            source_snippet=truncate_snippet(match.group(0)),
            position=match.start(),
            child_tags=find_child_tags(match.group(3)),
        )
        for match in BUTTON_PATTERN.finditer(markup)
    ]


def extract_input_buttons(markup: str) -> List[ElementRecord]:
    """<input> elements acting as buttons; their value is their visible text."""
    records = []
    for match in INPUT_PATTERN.finditer(markup):
        attrs = parse_attributes(clean_attr_string(match.group(2)))
        if attrs.get("type", "").strip().lower() not in BUTTON_INPUT_TYPES:
            continue
        records.append(ElementRecord(
            tag="input",
            attributes=attrs,
            text_content=attrs.get("value", "").strip(),
            source_snippet=truncate_snippet(match.group(0)),
            position=match.start(),
        ))
    return records


# --- RULES ---

@audit_spec(issue_type=IssueType.MISSING_ARIA_LABEL, inputs=["buttons"])
def check_button_names(buttons: List[ElementRecord]) -> List[AccessibilityIssue]:
    res = []
    for button in buttons:
        if button.text_content or button.has_attr_value(*NAME_ATTRIBUTES, "value"):
            continue
        res.append(AccessibilityIssue.create(
            IssueType.MISSING_ARIA_LABEL,
            Severity.ERROR,
            button.label,
            "Button has no accessible name. Screen readers cannot identify this button's purpose.",
            "4.1.2 Name, Role, Value",
            button.source_snippet
        ))
    return res


# --- DEFINITION ---
DEFINITION = ElementDefinition(
    name="button",
    category="buttons",
    extractors=[extract_buttons, extract_input_buttons],
    audit_rules=[check_button_names]
)

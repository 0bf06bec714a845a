from typing import List

from auditor.model import AccessibilityIssue, IssueType, Severity
from ..attributes import parse_attributes
from ..core import (
    ElementRecord, ElementDefinition, audit_spec,
    tag_pattern, truncate_snippet, clean_attr_string
)

# Matches both <img ...> and <img .../>; a stray </img> is simply ignored.
IMG_PATTERN = tag_pattern("img", closed=False)

DECORATIVE_ROLES = ("presentation", "none")


def extract_images(html: str) -> List[ElementRecord]:
    return [
        ElementRecord(
            tag="img",
            attributes=parse_attributes(clean_attr_string(match.group(2))),
            source_snippet=truncate_snippet(match.group(0)),
            position=match.start(),
        )
        for match in IMG_PATTERN.finditer(html)
    ]


# --- RULES ---

@audit_spec(issue_type=IssueType.MISSING_ALT_TEXT, inputs=["images"])
def check_missing_alt_text(images: List[ElementRecord]) -> List[AccessibilityIssue]:
    """
    An image needs an alt attribute unless it is marked decorative via role.
    alt="" is a valid decorative declaration and is not reported.
    """
    res = []
    for img in images:
        if img.attributes.get("role", "").strip().lower() in DECORATIVE_ROLES:
            continue
        if "alt" not in img.attributes:
            res.append(AccessibilityIssue.create(
                IssueType.MISSING_ALT_TEXT,
                Severity.ERROR,
                img.label,
                "Image is missing alt attribute. Screen readers cannot describe this image to users.",
                "1.1.1 Non-text Content",
                img.source_snippet
            ))
    return res


# --- DEFINITION ---
DEFINITION = ElementDefinition(
    name="image",
    category="images",
    extractors=[extract_images],
    audit_rules=[check_missing_alt_text]
)

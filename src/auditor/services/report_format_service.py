import json
from collections import OrderedDict
from typing import Dict, List, Any

from auditor.model import (
    AccessibilityIssue, CHECKS_PERFORMED, CORE_ISSUE_TYPES, ISSUE_TYPE_INFO, IssueType, ScanMode, ScanResult, Severity
)

RULE_WIDTH = 60


def describe_mode(mode: ScanMode) -> str:
    return "Full site" if mode == ScanMode.FULL else "Single page"


def to_json(result: ScanResult, indent: int = 2, ensure_ascii: bool = False) -> str:
    """Serializes a scan result with the camelCase keys of the HTTP API."""
    return json.dumps(result.to_dict(), ensure_ascii=ensure_ascii, indent=indent)


def group_issues(issues: List[AccessibilityIssue]) -> "OrderedDict[IssueType, Dict[Severity, List[AccessibilityIssue]]]":
    """
    Groups issues by category, then severity. Categories keep IssueType
    declaration order, errors come before warnings, and issues keep report order.
    """
    grouped: "OrderedDict[IssueType, Dict[Severity, List[AccessibilityIssue]]]" = OrderedDict()
    for issue_type in IssueType:
        matches = [issue for issue in issues if issue.type == issue_type]
        if not matches:
            continue
        grouped[issue_type] = {
            severity: [issue for issue in matches if issue.severity == severity]
            for severity in Severity
        }
    return grouped


def _format_issue(issue: AccessibilityIssue) -> List[str]:
    return [
        f"  - {issue.element} {issue.description}",
        f"    WCAG {issue.wcag_reference}",
        f"    {issue.code_snippet}",
    ]


def format_text(result: ScanResult) -> str:
    """Renders a human-readable report for the terminal."""
    lines: List[str] = [
        "=" * RULE_WIDTH,
        f"♿  Accessibility report for {result.url}",
        "=" * RULE_WIDTH,
        f"Scanned at:     {result.scanned_at.isoformat(timespec='seconds')}",
        f"Mode:           {describe_mode(result.scan_mode)}",
        f"Pages scanned:  {result.pages_scanned}",
        f"Issues:         {result.total_issues} "
        f"({result.error_count} errors, {result.warning_count} warnings)",
        f"Passed checks:  {result.passed_checks}/{CHECKS_PERFORMED}",
    ]

    if result.page_results:
        lines.append("-" * RULE_WIDTH)
        for page in result.page_results:
            lines.append(
                f"  {page.url}: {page.total_issues} issue(s) "
                f"({page.error_count} errors, {page.warning_count} warnings)"
            )

    if not result.issues:
        lines.extend(["-" * RULE_WIDTH, "✅ No accessibility issues found."])
        return "\n".join(lines)

    for issue_type, by_severity in group_issues(result.issues).items():
        info = ISSUE_TYPE_INFO[issue_type]
        count = sum(len(issues) for issues in by_severity.values())
        lines.extend(["-" * RULE_WIDTH, f"{info['label']} ({count})", f"  {info['description']}"])

        for severity, issues in by_severity.items():
            if not issues:
                continue
            lines.append(f" [{severity.value.upper()}]")
            for issue in issues:
                lines.extend(_format_issue(issue))

    return "\n".join(lines)


def issue_type_table() -> Dict[str, Dict[str, Any]]:
    """The label table keyed by issue type value, for the API."""
    return {
        issue_type.value: {
            **dict(ISSUE_TYPE_INFO[issue_type]),
            "countsTowardsPassedChecks": issue_type in CORE_ISSUE_TYPES,
        }
        for issue_type in IssueType
    }

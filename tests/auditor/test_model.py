# tests/auditor/test_model.py
import pytest

from auditor.model import (
    AccessibilityIssue, CHECKS_PERFORMED, IssueType, PageResult, ScanMode, ScanRequest, ScanResult, Severity
)
from auditor.services.report_format_service import format_text, group_issues, issue_type_table, to_json


def make_issue(issue_type=IssueType.MISSING_ALT_TEXT, severity=Severity.ERROR, snippet="<img>"):
    return AccessibilityIssue.create(issue_type, severity, "<img>", "Something is wrong.", "1.1.1", snippet)


def test_issue_ids_are_unique():
    assert make_issue().id != make_issue().id
    assert make_issue().fingerprint() == make_issue().fingerprint()


def test_page_result_totals():
    page = PageResult.build("https://a.test/", [
        make_issue(), make_issue(severity=Severity.WARNING), make_issue(IssueType.EMPTY_LINK)
    ])
    assert (page.total_issues, page.error_count, page.warning_count) == (3, 2, 1)


def test_single_page_result():
    page = PageResult.build("https://a.test/", [make_issue(), make_issue(IssueType.HEADING_HIERARCHY, Severity.WARNING)])
    result = ScanResult.from_pages("https://a.test/", ScanMode.SINGLE, [page])

    assert result.pages_scanned == 1
    assert result.total_issues == result.error_count + result.warning_count == len(result.issues) == 2
    assert result.passed_checks == CHECKS_PERFORMED - 2
    assert result.page_results is None


def test_passed_checks_are_global_across_pages():
    """Een regelgroep slaagt alleen als geen enkele pagina hem triggert."""
    pages = [
        PageResult.build("https://a.test/", [make_issue()]),
        PageResult.build("https://a.test/b", [make_issue(IssueType.EMPTY_LINK)]),
        PageResult.build("https://a.test/c", [make_issue()]),
    ]
    result = ScanResult.from_pages("https://a.test/", ScanMode.FULL, pages)

    assert result.passed_checks == 3
    assert result.pages_scanned == 3
    assert [p.url for p in result.page_results] == ["https://a.test/", "https://a.test/b", "https://a.test/c"]


def test_broken_links_do_not_count_against_passed_checks():
    page = PageResult.build("https://a.test/", [make_issue(IssueType.BROKEN_LINK)])
    result = ScanResult.from_pages("https://a.test/", ScanMode.SINGLE, [page])
    assert result.passed_checks == CHECKS_PERFORMED
    assert result.total_issues == 1


def test_passed_checks_bounds():
    issues = [make_issue(t) for t in IssueType]
    result = ScanResult.from_pages("https://a.test/", ScanMode.SINGLE, [PageResult.build("https://a.test/", issues)])
    assert result.passed_checks == 0


def test_full_mode_with_one_page_has_no_page_results():
    result = ScanResult.from_pages("https://a.test/", ScanMode.FULL, [PageResult.build("https://a.test/", [])])
    assert result.page_results is None
    assert "pageResults" not in result.to_dict()


def test_to_dict_uses_camel_case():
    pages = [PageResult.build("https://a.test/", [make_issue()]), PageResult.build("https://a.test/b", [])]
    data = ScanResult.from_pages("https://a.test/", ScanMode.FULL, pages).to_dict()

    assert set(data) == {
        "url", "scannedAt", "scanMode", "pagesScanned", "totalIssues", "errorCount",
        "warningCount", "passedChecks", "issues", "pageResults",
    }
    assert data["scanMode"] == "full"
    assert set(data["issues"][0]) == {"id", "type", "severity", "element", "description", "wcagReference", "codeSnippet"}
    assert data["issues"][0]["type"] == "missing_alt_text"
    assert data["pageResults"][1]["totalIssues"] == 0


def test_scan_request_defaults_to_single():
    assert ScanRequest(url="example.com").mode == ScanMode.SINGLE
    assert ScanRequest.model_validate({"url": "x", "mode": "full"}).mode == ScanMode.FULL


def test_scan_request_rejects_unknown_mode():
    with pytest.raises(ValueError):
        ScanRequest.model_validate({"url": "x", "mode": "deep"})


# --- Report formatting ---

def test_group_issues_by_type_then_severity():
    issues = [
        make_issue(IssueType.HEADING_HIERARCHY, Severity.WARNING),
        make_issue(IssueType.MISSING_ARIA_LABEL, Severity.WARNING),
        make_issue(IssueType.MISSING_ARIA_LABEL, Severity.ERROR),
    ]
    grouped = group_issues(issues)

    assert list(grouped) == [IssueType.MISSING_ARIA_LABEL, IssueType.HEADING_HIERARCHY]
    assert len(grouped[IssueType.MISSING_ARIA_LABEL][Severity.ERROR]) == 1
    assert len(grouped[IssueType.MISSING_ARIA_LABEL][Severity.WARNING]) == 1


def test_format_text_report():
    page = PageResult.build("https://a.test/", [make_issue(snippet='<img src="x.png">')])
    text = format_text(ScanResult.from_pages("https://a.test/", ScanMode.SINGLE, [page]))

    assert "https://a.test/" in text
    assert "Missing Alt Text (1)" in text
    assert "[ERROR]" in text
    assert '<img src="x.png">' in text
    assert f"Passed checks:  {CHECKS_PERFORMED - 1}/{CHECKS_PERFORMED}" in text


def test_format_text_clean_report():
    result = ScanResult.from_pages("https://a.test/", ScanMode.SINGLE, [PageResult.build("https://a.test/", [])])
    assert "No accessibility issues found" in format_text(result)


def test_to_json_and_issue_type_table():
    result = ScanResult.from_pages("https://a.test/", ScanMode.SINGLE, [PageResult.build("https://a.test/", [])])
    assert '"scanMode": "single"' in to_json(result)

    table = issue_type_table()
    assert list(table) == [t.value for t in IssueType]
    assert table["broken_link"]["countsTowardsPassedChecks"] is False
    assert table["missing_alt_text"]["label"] == "Missing Alt Text"

# tests/auditor/test_qngine.py
import pytest

from auditor.dom.builder import DOMBuilder
from auditor.dom.core import ElementDefinition
from auditor.dom.qngine import QNGINE
from auditor.dom.registry import DOMRegistry
from auditor.model import IssueType

URL = "https://example.com/"

MESSY_PAGE = """
<h2>Intro</h2><h4>Deep</h4><h1>Main</h1><h1>Again</h1>
<img src="a.png"><img src="b.png" alt="">
<a href="/x"></a><a href="/y"><svg></svg></a>
<button tabindex="2"></button><input name="q"><select></select>
"""


@pytest.fixture(scope="module")
def engine():
    return QNGINE()


def test_registry_discovers_all_rule_groups():
    DOMRegistry.discover()
    assert {rule.issue_type for rule in DOMRegistry.get_all_rules()} == set(IssueType)
    assert DOMRegistry.get_extractors("images")
    assert DOMRegistry.get_extractors("unknown") == []


def test_rules_are_sorted_by_issue_type():
    order = list(IssueType)
    positions = [order.index(rule.issue_type) for rule in DOMRegistry.get_all_rules()]
    assert positions == sorted(positions)


def test_definition_rejects_undecorated_rule():
    def plain_rule(images):
        return []

    with pytest.raises(ValueError):
        ElementDefinition(name="broken", audit_rules=[plain_rule])


def test_audit_is_deterministic(engine):
    """Twee runs op hetzelfde document leveren dezelfde bevindingen op, op de id na."""
    doc = DOMBuilder().parse_doc(URL, MESSY_PAGE)
    first = engine.run_audit(doc)
    second = engine.run_audit(doc)

    assert [issue.fingerprint() for issue in first] == [issue.fingerprint() for issue in second]
    assert {issue.id for issue in first}.isdisjoint({issue.id for issue in second})


def test_issues_grouped_in_rule_order(engine):
    issues = engine.run_audit(DOMBuilder().parse_doc(URL, MESSY_PAGE))
    order = list(IssueType)
    positions = [order.index(issue.type) for issue in issues]

    assert positions == sorted(positions)
    assert set(issue.type for issue in issues) == set(IssueType) - {IssueType.BROKEN_LINK}


def test_empty_document_yields_no_issues(engine):
    assert engine.run_audit(DOMBuilder().parse_doc(URL, "")) == []

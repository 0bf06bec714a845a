# tests/auditor/test_attributes.py
import pytest

from auditor.dom.attributes import parse_attributes


@pytest.mark.parametrize("raw, expected", [
    (' src="x.png" alt="Logo"', {"src": "x.png", "alt": "Logo"}),
    (" src='x.png' alt=''", {"src": "x.png", "alt": ""}),
    (" width=100 height=50", {"width": "100", "height": "50"}),
    (" href=/search?q=a11y", {"href": "/search?q=a11y"}),
    (" data-expr=a=b=c title=x", {"data-expr": "a=b=c", "title": "x"}),
    (" disabled", {"disabled": ""}),
    (' SRC="x.png" Alt="A"', {"src": "x.png", "alt": "A"}),
])
def test_parse_attribute_forms(raw, expected):
    """Gequote, ongequote en booleaanse attributen worden allemaal herkend."""
    assert parse_attributes(raw) == expected


def test_parse_mixed_attributes():
    attrs = parse_attributes(' type=checkbox checked id="agree" data-x=\'1\'')
    assert attrs == {"type": "checkbox", "checked": "", "id": "agree", "data-x": "1"}


def test_first_occurrence_wins():
    """Bij dubbele attributen telt de eerste waarde, zoals in een browser."""
    assert parse_attributes(' alt="first" alt="second"')["alt"] == "first"


def test_values_do_not_leak_into_other_attributes():
    """Tekst binnen een waarde mag nooit als los attribuut verschijnen."""
    attrs = parse_attributes(' title="alt text here" src="a.png"')
    assert "alt" not in attrs
    assert attrs["title"] == "alt text here"


def test_value_containing_angle_bracket():
    attrs = parse_attributes(' data-rule="a > b" alt="x"')
    assert attrs["data-rule"] == "a > b"
    assert attrs["alt"] == "x"


def test_raw_values_are_not_decoded():
    assert parse_attributes(' href="/a?x=1&amp;y=2"')["href"] == "/a?x=1&amp;y=2"


@pytest.mark.parametrize("raw", ["", "   ", ' ="oops"', ' "loose"', " = = ="])
def test_malformed_input_never_raises(raw):
    """Rommel levert hooguit een lege of gedeeltelijke mapping op."""
    assert isinstance(parse_attributes(raw), dict)

# src/auditor/dom/attributes.py
import re
from typing import Dict

# name="value" / name='value'
_QUOTED_ATTR = re.compile(r'''([^\s"'<>/=]+)\s*=\s*(?:"([^"]*)"|'([^']*)')''')
# name=value (no quotes, runs until whitespace or the end of the tag; may contain '=')
_UNQUOTED_ATTR = re.compile(r'''([^\s"'<>/=]+)\s*=\s*([^\s"'<>`]+)''')
# Bare words left over after the value passes: boolean attributes.
_BARE_ATTR = re.compile(r'''(?:^|(?<=\s))([^\s"'<>/=]+)(?=\s|/|$)''')


def parse_attributes(attr_string: str) -> Dict[str, str]:
    """
    Parses the raw text between a tag name and its closing '>' into a mapping
    of lower-cased attribute names to raw (un-decoded) values.

    Quoted pairs are read first, then unquoted pairs, then bare words which
    are recorded as boolean attributes with an empty value. An earlier pass
    always wins, as does the first occurrence of a repeated attribute.
    Unrecognized fragments are skipped; this function never raises.
    """
    attrs: Dict[str, str] = {}
    if not attr_string:
        return attrs

    remaining = attr_string
    for pattern in (_QUOTED_ATTR, _UNQUOTED_ATTR):
        for match in pattern.finditer(remaining):
            name = match.group(1).lower()
            if name not in attrs:
                value = match.group(2)
                if value is None and pattern is _QUOTED_ATTR:
                    value = match.group(3)
                attrs[name] = value or ""
        # Blank out what was consumed so values never leak into later passes
        remaining = pattern.sub(" ", remaining)

    for match in _BARE_ATTR.finditer(remaining):
        name = match.group(1).lower()
        if name not in attrs:
            attrs[name] = ""

    return attrs

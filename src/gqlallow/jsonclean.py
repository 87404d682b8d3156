"""Normalize a submitted variables block into plain, indented JSON.

Variables pasted next to a query are often not strict JSON: they carry
comments, trailing commas and ``$name`` placeholders standing in for values
the gateway fills in later. clean() removes those and re-emits the rest:

    {"id": $id, "limit": 10,   // page size
     "tags": ["a",],}
    →
    {
      "id": null,
      "limit": 10,
      "tags": [
        "a"
      ]
    }
"""

from __future__ import annotations

import json
import re

from gqlallow.errors import VarsError

_STRIP_RE = re.compile(
    r"""
      (?P<string>"(?:\\.|[^"\\])*")
    | (?P<comment>//[^\n]*|/\*.*?\*/|\#[^\n]*)
    | (?P<placeholder>\$[_A-Za-z][_0-9A-Za-z]*)
    """,
    re.VERBOSE | re.DOTALL,
)

# Second pass: comments are gone, so only whitespace can sit between a
# trailing comma and its closing bracket.
_COMMA_RE = re.compile(
    r"""
      (?P<string>"(?:\\.|[^"\\])*")
    | (?P<comma>,(?=\s*[}\]]))
    """,
    re.VERBOSE | re.DOTALL,
)


def _replace(m: re.Match[str]) -> str:
    if m.lastgroup == "string":
        return m.group()
    if m.lastgroup == "placeholder":
        return "null"
    return ""


def strip(text: str) -> str:
    """Drop comments and trailing commas and null out placeholders, outside strings."""
    return _COMMA_RE.sub(_replace, _STRIP_RE.sub(_replace, text))


def clean(text: str, indent: int = 2) -> str:
    """Return the variables block as indented JSON."""
    try:
        data = json.loads(strip(text))
    except json.JSONDecodeError as exc:
        msg = f"invalid variables json: {exc}"
        raise VarsError(msg) from exc
    return json.dumps(data, indent=indent, ensure_ascii=False)

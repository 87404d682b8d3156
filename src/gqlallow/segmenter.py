"""Split a submitted GraphQL document into its regions without a grammar parse.

A submitted document may mix, in any order and separated only by whitespace
or comments:

    # leading comment block
    variables { "id": 1 }
    query GetUser($id: ID!) { user(id: $id) { ...UserFields } }
    fragment UserFields on User { name }

segment() walks the token stream once. The regions never nest at the top
level, so a handful of leading keywords seen at nesting depth 0 is enough to
find every boundary:

    variables                       → VARIABLES
    query / mutation / subscription → QUERY
    fragment                        → FRAGMENT
    {  (only before any region)     → QUERY (anonymous shorthand)

Comments and strings are single tokens, so keywords inside them never split.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import TYPE_CHECKING, NamedTuple

from gqlallow.errors import MalformedQueryError
from gqlallow.models import Fragment, Item

if TYPE_CHECKING:
    from collections.abc import Iterator


class Region(Enum):
    COMMENT = "comment"
    VARIABLES = "variables"
    QUERY = "query"
    FRAGMENT = "fragment"


_TRIGGERS: dict[str, Region] = {
    "variables": Region.VARIABLES,
    "query": Region.QUERY,
    "mutation": Region.QUERY,
    "subscription": Region.QUERY,
    "fragment": Region.FRAGMENT,
}

_OPENERS = "{(["
_CLOSERS = "})]"


# ---------------------------------------------------------------------------
# Tokenizer
# ---------------------------------------------------------------------------

class Token(NamedTuple):
    kind: str       # comment | string | name | number | punct
    text: str
    start: int
    end: int


_TOKEN_RE = re.compile(
    r"""
      (?P<space>\s+)
    | (?P<comment>\#[^\n]*|//[^\n]*|/\*.*?\*/)
    | (?P<string>\"\"\"(?:\\\"\"\"|[^"]|"(?!""))*\"\"\"|"(?:\\.|[^"\\\n])*")
    | (?P<bad>/\*|")
    | (?P<name>[_A-Za-z][_0-9A-Za-z]*)
    | (?P<number>-?\d+(?:\.\d+)?(?:[eE][+-]?\d+)?)
    | (?P<punct>.)
    """,
    re.VERBOSE | re.DOTALL,
)


def tokenize(text: str) -> Iterator[Token]:
    """Yield the tokens of text, comments included, whitespace skipped."""
    for m in _TOKEN_RE.finditer(text):
        kind = m.lastgroup
        if kind == "space":
            continue
        if kind == "bad":
            what = "comment" if m.group() == "/*" else "string"
            msg = f"unterminated {what} at offset {m.start()}"
            raise MalformedQueryError(msg)
        yield Token(kind or "punct", m.group(), m.start(), m.end())


# ---------------------------------------------------------------------------
# Fragment namer
# ---------------------------------------------------------------------------

_FRAGMENT_NAME_RE = re.compile(r"^\s*fragment\s+([_A-Za-z][_0-9A-Za-z]*)")


def fragment_name(value: str) -> str:
    """Return the name declared by a ``fragment <Name> on <Type> {...}`` body."""
    m = _FRAGMENT_NAME_RE.match(value)
    if m is None or m.group(1) == "on":
        msg = f"fragment has no name: {value[:40]!r}"
        raise MalformedQueryError(msg)
    return m.group(1)


# ---------------------------------------------------------------------------
# Segmenter
# ---------------------------------------------------------------------------

def transition(token: Token) -> Region | None:
    """Region a top-level token opens, or None if it is not a trigger."""
    if token.kind != "name":
        return None
    return _TRIGGERS.get(token.text)


def _is_close(token: Token | None) -> bool:
    return token is not None and token.kind == "punct" and token.text == "}"


def _flush(item: Item, region: Region, text: str, start: int, close: int | None) -> None:
    """Assign text[start:…] to the field owned by region."""
    if region is Region.COMMENT:
        item.comment = text[start:].strip()
        return

    # Braced regions end exactly at their last closing brace; whatever
    # trails it up to the next trigger is dropped.
    if close is None:
        msg = f"{region.value} block has no closing brace"
        raise MalformedQueryError(msg)
    value = text[start:close].strip()

    if region is Region.VARIABLES:
        item.vars = value
    elif region is Region.QUERY:
        if item.query:
            msg = "document contains more than one operation"
            raise MalformedQueryError(msg)
        item.query = value
    elif region is Region.FRAGMENT:
        item.fragments.append(Fragment(name=fragment_name(value), value=value))


def segment(text: str) -> Item:
    """Partition a raw document into comment, vars, query and fragments.

    Raises MalformedQueryError on unterminated strings/comments, a braced
    region with no closing brace, a second operation, or a nameless fragment.
    A document with no operation at all is not an error here.
    """
    item = Item()
    region = Region.COMMENT
    split = 0                       # start of the current region's span
    close: int | None = None        # end of the last '}' since split
    depth = 0
    prev: Token | None = None       # previous non-comment token

    for tok in tokenize(text):
        if tok.kind == "comment":
            continue

        if depth == 0:
            nxt: Region | None = None
            if region is Region.COMMENT:
                nxt = transition(tok)
                if nxt is None and tok.kind == "punct" and tok.text == "{":
                    nxt = Region.QUERY
            elif _is_close(prev):
                nxt = transition(tok)

            if nxt is not None:
                _flush(item, region, text[:tok.start], split, close)
                region = nxt
                # The keyword belongs to operation and fragment bodies but
                # not to the variables block.
                split = tok.end if nxt is Region.VARIABLES else tok.start
                close = None

        if tok.kind == "punct":
            if tok.text in _OPENERS:
                depth += 1
            elif tok.text in _CLOSERS:
                depth = max(depth - 1, 0)
                if tok.text == "}":
                    close = tok.end
        prev = tok

    _flush(item, region, text, split, close)
    return item

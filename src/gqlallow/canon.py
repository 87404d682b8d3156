"""Canonical form and authoritative name of an operation, via graphql-core."""

from __future__ import annotations

from typing import NamedTuple

from graphql import GraphQLError, OperationDefinitionNode, parse, print_ast

from gqlallow.errors import CanonicalizeError


class Canonical(NamedTuple):
    """Parser view of a document.

    The store persists the submitted text and only takes ``name`` from here;
    ``query`` is informational, for callers that want the normalized form.
    """

    query: str      # normalized re-print of the document
    name: str       # operation name


def canonicalize(query: str) -> Canonical:
    """Re-parse query and return its normalized text and operation name.

    Only named operations can be allow-listed, so an anonymous operation (or
    a document with no operation at all) is rejected.
    """
    try:
        doc = parse(query, no_location=True)
    except GraphQLError as exc:
        raise CanonicalizeError(str(exc)) from exc

    op = next(
        (d for d in doc.definitions if isinstance(d, OperationDefinitionNode)),
        None,
    )
    if op is None:
        msg = "no operation defined"
        raise CanonicalizeError(msg)
    if op.name is None or not op.name.value:
        msg = "no query name defined. only named queries are saved to the allow list"
        raise CanonicalizeError(msg)

    return Canonical(query=print_ast(doc), name=op.name.value)

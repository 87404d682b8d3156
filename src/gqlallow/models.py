"""Data models for the allow-list store."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


def compose_name(namespace: str, name: str, ext: str = "") -> str:
    """Return the on-disk file name for (namespace, name): ``ns.name.ext`` or ``name.ext``."""
    if namespace:
        return f"{namespace}.{name}{ext}"
    return f"{name}{ext}"


def split_name(stem: str) -> tuple[str, str]:
    """Split a file stem on its last dot into (namespace, name).

    ``"billing.GetInvoice"`` → ``("billing", "GetInvoice")``
    ``"GetInvoice"``         → ``("", "GetInvoice")``
    ``"billing."``           → ``("", "")``
    """
    i = stem.rfind(".")
    if i == -1:
        return "", stem
    if i < len(stem) - 1:
        return stem[:i], stem[i + 1:]
    return "", ""


def _lower_keys(d: dict[str, Any]) -> dict[str, Any]:
    return {str(k).lower(): v for k, v in d.items()}


@dataclass
class Order:
    """Iteration hint: a variable name and the values the gateway cycles it through."""

    var: str = ""
    values: list[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.var and not self.values


@dataclass
class Metadata:
    order: Order = field(default_factory=Order)

    def is_empty(self) -> bool:
        return self.order.is_empty()

    @classmethod
    def from_dict(cls, d: dict[str, Any] | None) -> Metadata:
        order = _lower_keys((d or {}).get("order") or {})
        return cls(order=Order(
            var=str(order.get("var") or ""),
            values=[str(v) for v in order.get("values") or []],
        ))

    def to_dict(self) -> dict[str, Any]:
        if self.order.is_empty():
            return {}
        order: dict[str, Any] = {}
        if self.order.var:
            order["var"] = self.order.var
        if self.order.values:
            order["values"] = list(self.order.values)
        return {"order": order}


@dataclass
class Fragment:
    """A named fragment definition found alongside an operation."""

    name: str
    value: str


@dataclass
class Item:
    """One allow-listed operation.

    ``fragments`` is transient: fragments are persisted as their own files
    under ``fragments/`` and never embedded in the record document.
    """

    name: str = ""
    query: str = ""
    namespace: str = ""
    comment: str = ""
    vars: str = ""
    metadata: Metadata = field(default_factory=Metadata)
    fragments: list[Fragment] = field(default_factory=list, repr=False, compare=False)

    @property
    def key(self) -> str:
        """Lookup key: the lowercased name."""
        return self.name.lower()

    @property
    def filename(self) -> str:
        return compose_name(self.namespace, self.name, ".yaml")

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Item:
        # Keys are matched case-insensitively so hand-written records using
        # ``Name:``/``Query:`` decode the same as generated ones.
        d = _lower_keys(d)
        return cls(
            namespace=str(d.get("namespace") or ""),
            name=str(d.get("name") or ""),
            comment=str(d.get("comment") or ""),
            query=str(d.get("query") or ""),
            vars=str(d.get("vars") or ""),
            metadata=Metadata.from_dict(d),
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {}
        if self.namespace:
            d["namespace"] = self.namespace
        d["name"] = self.name
        if self.comment:
            d["comment"] = self.comment
        d["query"] = self.query
        if self.vars:
            d["vars"] = self.vars
        d.update(self.metadata.to_dict())
        return d

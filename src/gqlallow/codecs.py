"""File formats accepted under queries/, dispatched on extension.

    .gql / .graphql   raw GraphQL document, segmented on read; namespace and
                      name come from the file name (``ns.Name.gql``)
    .yml / .yaml      structured record written by the store

New formats plug in with register() without touching dispatch.
"""

from __future__ import annotations

import posixpath
from typing import TYPE_CHECKING, Any

import yaml

from gqlallow.errors import InvalidFilenameError, UnknownFileTypeError
from gqlallow.models import Item, split_name
from gqlallow.segmenter import segment

if TYPE_CHECKING:
    from collections.abc import Callable

    from fsspec import AbstractFileSystem

    Decoder = Callable[[AbstractFileSystem, str], Item]

# Probe order for lookups by name.
QUERY_EXTENSIONS = (".gql", ".graphql", ".yml", ".yaml")


def read_text(fs: AbstractFileSystem, path: str) -> str:
    return fs.cat_file(path).decode("utf-8")


# ---------------------------------------------------------------------------
# Decoders
# ---------------------------------------------------------------------------

def item_from_gql(fs: AbstractFileSystem, path: str) -> Item:
    stem, _ = posixpath.splitext(posixpath.basename(path))
    namespace, name = split_name(stem)
    if not name:
        raise InvalidFilenameError(path)

    item = segment(read_text(fs, path))
    item.namespace = namespace
    item.name = name
    return item


def item_from_yaml(fs: AbstractFileSystem, path: str) -> Item:
    data = yaml.safe_load(read_text(fs, path)) or {}
    if not isinstance(data, dict):
        msg = f"{path}: expected a mapping, got {type(data).__name__}"
        raise yaml.YAMLError(msg)
    return Item.from_dict(data)


_DECODERS: dict[str, Decoder] = {
    ".gql": item_from_gql,
    ".graphql": item_from_gql,
    ".yml": item_from_yaml,
    ".yaml": item_from_yaml,
}


def register(ext: str, decoder: Decoder) -> None:
    """Register (or replace) the decoder for a file extension, e.g. ``".json"``."""
    if not ext.startswith("."):
        ext = "." + ext
    _DECODERS[ext.lower()] = decoder


def decoder_for(path: str) -> Decoder:
    """Return the decoder for path's extension or raise UnknownFileTypeError."""
    _, ext = posixpath.splitext(path)
    try:
        return _DECODERS[ext.lower()]
    except KeyError:
        raise UnknownFileTypeError(path) from None


def decode(fs: AbstractFileSystem, path: str) -> Item:
    return decoder_for(path)(fs, path)


# ---------------------------------------------------------------------------
# Encoder
# ---------------------------------------------------------------------------

class _Dumper(yaml.SafeDumper):
    """SafeDumper that writes multi-line strings as literal blocks."""


def _represent_str(dumper: yaml.SafeDumper, data: str) -> Any:
    style = "|" if "\n" in data else None
    return dumper.represent_scalar("tag:yaml.org,2002:str", data, style=style)


_Dumper.add_representer(str, _represent_str)


def dump_item(item: Item) -> str:
    """YAML document for item (fragments excluded)."""
    return yaml.dump(
        item.to_dict(),
        Dumper=_Dumper,
        indent=2,
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
    )

"""Allow-list store for a GraphQL gateway.

Approved operations are kept as files so a gateway can reject anything not
on the list:

    .allowlist/
        queries/
            billing.GetInvoice.yaml     # record: name, query, vars, order hint
            Ping.gql                    # raw documents are accepted too
        fragments/
            billing.InvoiceFields       # raw fragment body

A submitted document may carry a leading comment, a ``variables`` block, one
operation and any number of fragments. segment() splits it; AllowList.set()
queues it for the single background writer, which names it from the parsed
operation and writes the record and its fragments.

    store = AllowList(fsspec.filesystem("file"), "/srv/gateway/.allowlist")
    store.set(b'{"id": 1}', document, namespace="billing")
    store.close()                                   # drain pending writes
    item = store.get_by_name("billing", "GetInvoice")
    fetch = store.fragment_fetcher("billing")
    fetch("InvoiceFields")
"""

from gqlallow.config import AllowListConfig, init_config, load_config
from gqlallow.errors import (
    AllowListError,
    CanonicalizeError,
    EmptyQueryError,
    MalformedQueryError,
    ReadOnlyError,
    StoreClosedError,
    UnknownFileTypeError,
)
from gqlallow.models import Fragment, Item, Metadata, Order
from gqlallow.segmenter import segment
from gqlallow.store import AllowList, SaveResult

__all__ = [
    "AllowList",
    "AllowListConfig",
    "AllowListError",
    "CanonicalizeError",
    "EmptyQueryError",
    "Fragment",
    "Item",
    "MalformedQueryError",
    "Metadata",
    "Order",
    "ReadOnlyError",
    "SaveResult",
    "StoreClosedError",
    "UnknownFileTypeError",
    "init_config",
    "load_config",
    "segment",
]

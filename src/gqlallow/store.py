"""AllowList: the persisted set of approved GraphQL operations.

Layout under the store root (any fsspec filesystem):

    queries/
        <ns>.<Name>.yaml      # written by the store
        <ns>.<Name>.gql       # hand-written documents are read too
    fragments/
        <ns>.<FragmentName>   # raw fragment body, no extension

Writes are serialized through one background writer thread fed by a bounded
queue. set() validates and segments synchronously, then hands the draft over
and returns; persistence happens later and its outcome is only logged and
delivered to the optional on_result observer. Call wait() or close() for a
durability point.

Reads are synchronous, uncached and take no locks. A read racing a write may
see a record without all of its fragments.
"""

from __future__ import annotations

import logging
import posixpath
import queue
import threading
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

from gqlallow import jsonclean
from gqlallow.canon import canonicalize
from gqlallow.codecs import QUERY_EXTENSIONS, decode, dump_item, read_text
from gqlallow.errors import (
    EmptyQueryError,
    ReadOnlyError,
    StoreClosedError,
    UnknownFileTypeError,
    VarsError,
)
from gqlallow.models import Item, Metadata, compose_name
from gqlallow.segmenter import segment

if TYPE_CHECKING:
    from collections.abc import Callable

    from fsspec import AbstractFileSystem

    from gqlallow.canon import Canonical
    from gqlallow.config import AllowListConfig

logger = logging.getLogger("gqlallow.store")

QUERY_DIR = "queries"
FRAGMENT_DIR = "fragments"

_STOP = object()


def _remaining(deadline: float | None) -> float | None:
    if deadline is None:
        return None
    return max(0.0, deadline - time.monotonic())


@dataclass
class SaveResult:
    """Outcome of one background save."""

    item: Item
    path: str = ""
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class AllowList:
    """fsspec-backed allow-list store."""

    def __init__(
        self,
        fs: AbstractFileSystem,
        root: str = "/",
        *,
        read_only: bool = False,
        queue_size: int = 1,
        on_result: Callable[[SaveResult], None] | None = None,
        canonicalizer: Callable[[str], Canonical] = canonicalize,
    ) -> None:
        if fs is None:
            msg = "no filesystem defined for the allow list"
            raise ValueError(msg)

        self.fs = fs
        self.root = root.rstrip("/") or "/"
        self._on_result = on_result
        self._canonicalize = canonicalizer
        self._queue: queue.Queue[object] | None = None
        self._writer: threading.Thread | None = None
        self._closed = False
        self._lock = threading.Lock()

        if read_only:
            return

        for d in (self.queries_dir, self.fragments_dir):
            try:
                fs.makedirs(d, exist_ok=True)
            except OSError:
                logger.warning("allow list: cannot create %s", d, exc_info=True)

        self._queue = queue.Queue(maxsize=queue_size)
        self._writer = threading.Thread(target=self._run, daemon=True, name="gqlallow-writer")
        self._writer.start()

    @classmethod
    def open(cls, cfg: AllowListConfig, **kwargs: object) -> AllowList:
        """Open the store described by cfg."""
        return cls(
            cfg.filesystem(),
            cfg.store_dir.as_posix(),
            read_only=cfg.read_only,
            queue_size=cfg.queue_size,
            **kwargs,  # type: ignore[arg-type]
        )

    @classmethod
    def open_read_only(cls, fs: AbstractFileSystem, root: str = "/") -> AllowList:
        return cls(fs, root, read_only=True)

    def __enter__(self) -> AllowList:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    @property
    def queries_dir(self) -> str:
        return posixpath.join(self.root, QUERY_DIR)

    @property
    def fragments_dir(self) -> str:
        return posixpath.join(self.root, FRAGMENT_DIR)

    @property
    def read_only(self) -> bool:
        return self._queue is None

    def _resolve(self, path: str) -> str:
        if path.startswith("/") or "://" in path:
            return path
        # Paths handed out by the store (SaveResult.path) already carry a relative root.
        if self.root != "/" and path.startswith(self.root + "/"):
            return path
        return posixpath.join(self.root, path)

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def set(
        self,
        vars: bytes | str | None,
        query: str,
        metadata: Metadata | None = None,
        namespace: str = "",
    ) -> None:
        """Validate and queue a document for saving.

        Raises ReadOnlyError, StoreClosedError, EmptyQueryError,
        MalformedQueryError or VarsError (undecodable bytes). Returning
        normally only means the document was accepted for writing; it may
        still be dropped later (for instance an anonymous operation is never
        persisted).

        Blocks while the write queue is full.
        """
        if self._queue is None:
            raise ReadOnlyError
        if self._closed:
            raise StoreClosedError
        if not query:
            raise EmptyQueryError

        item = segment(query)
        item.namespace = namespace
        if isinstance(vars, bytes):
            try:
                vars = vars.decode("utf-8")
            except UnicodeDecodeError as exc:
                msg = f"variables are not valid utf-8: {exc}"
                raise VarsError(msg) from exc
        # Caller-supplied variables win over a variables block in the document.
        if vars:
            item.vars = vars
        item.metadata = metadata or Metadata()

        # close() takes the same lock, so nothing is enqueued behind the stop marker.
        with self._lock:
            if self._closed:
                raise StoreClosedError
            self._queue.put(item)

    def wait(self, timeout: float | None = None) -> bool:
        """Block until every queued document has been processed.

        Returns False if timeout expired first.
        """
        if self._queue is None:
            return True
        q = self._queue
        with q.all_tasks_done:
            return q.all_tasks_done.wait_for(lambda: q.unfinished_tasks == 0, timeout)

    def close(self, *, drain: bool = True, timeout: float | None = None) -> None:
        """Stop the writer.

        drain=True writes everything already queued first; drain=False
        discards pending documents (the count is logged). Safe to call twice.
        Reads keep working after close. timeout bounds every blocking step;
        on expiry the writer is left running and a warning is logged.
        """
        if self._queue is None:
            return
        deadline = None if timeout is None else time.monotonic() + timeout

        if not self._lock.acquire(timeout=-1 if timeout is None else timeout):
            logger.warning("allow list: close timed out waiting for a pending set")
            return
        try:
            if self._closed:
                return
            self._closed = True
        finally:
            self._lock.release()

        if not drain:
            dropped = self._discard_pending()
            if dropped:
                logger.warning("allow list: discarded %d pending save(s) on close", dropped)

        try:
            self._queue.put(_STOP, timeout=_remaining(deadline))
        except queue.Full:
            logger.warning("allow list: writer still busy after %.1fs", timeout or 0.0)
            return
        if self._writer is not None:
            self._writer.join(_remaining(deadline))
            if self._writer.is_alive():
                logger.warning("allow list: writer still busy after %.1fs", timeout or 0.0)
                return

        # Nothing should be left; anything that is has no writer to take it.
        late = self._discard_pending()
        if late:
            logger.warning("allow list: discarded %d save(s) queued during close", late)

    def _discard_pending(self) -> int:
        assert self._queue is not None
        dropped = 0
        while True:
            try:
                self._queue.get_nowait()
            except queue.Empty:
                return dropped
            self._queue.task_done()
            dropped += 1

    # ------------------------------------------------------------------
    # Writer
    # ------------------------------------------------------------------

    def _run(self) -> None:
        assert self._queue is not None
        while True:
            obj = self._queue.get()
            try:
                if obj is _STOP:
                    return
                assert isinstance(obj, Item)
                self._report(self._save(obj))
            finally:
                self._queue.task_done()

    def _report(self, result: SaveResult) -> None:
        if self._on_result is None:
            return
        try:
            self._on_result(result)
        except Exception:
            logger.exception("allow list: result observer failed")

    def _save(self, item: Item) -> SaveResult:
        """Canonicalize, then persist. Never raises."""
        try:
            canon = self._canonicalize(item.query)
            item.name = canon.name
            path = self._save_item(item)
        except Exception as exc:
            logger.warning("allow list save: %s", exc)
            return SaveResult(item=item, error=exc)
        logger.debug("allow list: saved %s (%d fragments)", path, len(item.fragments))
        return SaveResult(item=item, path=path)

    def _save_item(self, item: Item) -> str:
        """Write the record, then each fragment. No rollback on failure."""
        if item.vars:
            item.vars = jsonclean.clean(item.vars)

        path = posixpath.join(self.queries_dir, item.filename)
        self.fs.pipe_file(path, dump_item(item).encode("utf-8"))

        for frag in item.fragments:
            self.fs.pipe_file(
                posixpath.join(self.fragments_dir, compose_name(item.namespace, frag.name)),
                frag.value.encode("utf-8"),
            )
        return path

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def load(self) -> list[Item]:
        """Every record under queries/, skipping files of unknown type."""
        if not self.fs.isdir(self.queries_dir):
            return []

        items: list[Item] = []
        entries = sorted(self.fs.ls(self.queries_dir, detail=True), key=lambda e: e["name"])
        for entry in entries:
            if entry.get("type") == "directory":
                continue
            try:
                item = decode(self.fs, entry["name"])
            except UnknownFileTypeError:
                continue
            items.append(item)
        return items

    def get(self, path: str) -> Item:
        """Decode one file by extension. Relative paths resolve against the root."""
        return decode(self.fs, self._resolve(path))

    def get_by_name(self, namespace: str, name: str) -> Item | None:
        """Look up (namespace, name) trying .gql, .graphql, .yml, .yaml in order.

        Returns None when no file exists.
        """
        base = posixpath.join(self.queries_dir, compose_name(namespace, name))
        for ext in QUERY_EXTENSIONS:
            path = base + ext
            if self.fs.exists(path):
                return decode(self.fs, path)
        return None

    def fragment_fetcher(self, namespace: str = "") -> Callable[[str], str]:
        """Return a function reading fragments/<ns>.<name> for this namespace."""

        def fetch(name: str) -> str:
            return read_text(self.fs, posixpath.join(self.fragments_dir, compose_name(namespace, name)))

        return fetch

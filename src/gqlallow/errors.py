"""Exception types raised by the allow-list store."""

from __future__ import annotations


class AllowListError(Exception):
    """Base class for allow-list errors."""


class ReadOnlyError(AllowListError):
    """Write attempted on a store opened read-only."""

    def __init__(self) -> None:
        super().__init__("allow list is read-only")


class EmptyQueryError(AllowListError, ValueError):
    def __init__(self) -> None:
        super().__init__("empty query")


class StoreClosedError(AllowListError):
    def __init__(self) -> None:
        super().__init__("allow list is closed")


class MalformedQueryError(AllowListError, ValueError):
    """The submitted document could not be split into its regions."""


class UnknownFileTypeError(AllowListError):
    """No decoder is registered for the file's extension.

    ``AllowList.load`` skips such files; ``get`` and ``get_by_name`` raise.
    """

    def __init__(self, path: str) -> None:
        super().__init__(f"unknown filetype: {path}")
        self.path = path


class InvalidFilenameError(AllowListError, ValueError):
    def __init__(self, path: str) -> None:
        super().__init__(f"invalid filename: {path}")
        self.path = path


class CanonicalizeError(AllowListError):
    """The GraphQL parser rejected the query or it has no operation name."""


class VarsError(AllowListError, ValueError):
    """The variables block is not valid JSON."""

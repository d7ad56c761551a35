from __future__ import annotations


class DigestError(Exception):
    """Base class for failures inside one digest run."""


class FetchError(DigestError):
    """Raised when an upstream HTTP request does not succeed."""


class ParseError(DigestError):
    """Raised when the feed body is not a well-formed feed document."""


class PersistenceError(DigestError):
    """Raised when the ledger cannot be written back."""

"""Error taxonomy shared by ingestion, storage and the read path."""

from __future__ import annotations


class NewsdeskError(Exception):
    """Base class for newsdesk errors"""
    pass


class InvalidInput(NewsdeskError):
    """Input cannot be used (e.g. a title with nothing to slug)."""
    pass


class SourceUnavailable(NewsdeskError):
    """The external news source failed; the whole run is aborted."""
    pass


class StoreUnavailable(NewsdeskError):
    """A persistence or lookup call failed."""
    pass

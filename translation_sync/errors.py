"""
Translation sync exceptions

Every fault raised by the status engine, the dispatch router and the
interchange codec derives from TranslationSyncError so callers can catch
one type and render the code.
"""
from typing import Any, Dict, Optional


class TranslationSyncError(Exception):
    """Base error with an optional stable code and details."""

    code = "translation_sync_error"

    def __init__(self, message: str, code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        if code is not None:
            self.code = code
        self.details = details or {}


class ItemNotFoundError(TranslationSyncError):
    """A referenced content item does not exist."""

    code = "not_found"


class NoGroupError(TranslationSyncError):
    """The item takes part in no translation relationship."""

    code = "no_group"


class MalformedInterchangeError(TranslationSyncError):
    """The interchange document is unparsable or has no <file> container."""

    code = "malformed_interchange"


class UnsupportedLocaleError(TranslationSyncError):
    """A dispatch names a locale outside the configured and enabled set."""

    code = "unsupported_locale"


class NotOursError(TranslationSyncError):
    """The bulk action token belongs to someone else."""

    code = "not_ours"


class EmptySelectionError(TranslationSyncError):
    """A bulk action was invoked with no selected items."""

    code = "empty_selection"


class IncomparableRevisionError(TranslationSyncError):
    """Two revision markers of a group cannot be ordered against each other."""

    code = "incomparable_revision"

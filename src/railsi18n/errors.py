# src/railsi18n/errors.py
"""
Exception taxonomy for RailsI18n.

Per-document failures (:class:`MalformedDocument`, :class:`ShapeError`,
:class:`DocumentUnreadable`) are contained by the loader, which logs and
skips the document.  :class:`DetectionFailed` never leaves the locale
detector.  :class:`UnresolvedUnit` is the only error that reaches callers.
"""
from typing import Optional


class I18nError(Exception):
    """Base exception for RailsI18n errors."""


class MalformedDocument(I18nError):
    """Raised when a locale document is not valid YAML."""

    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        self.line = line
        self.column = column
        if line is not None:
            message = f"{message} (line {line + 1}, column {(column or 0) + 1})"
        super().__init__(message)


class ShapeError(I18nError):
    """Raised when a document does not have exactly one top-level locale key."""

    def __init__(self, key_count: int):
        self.key_count = key_count
        super().__init__(f"Expected exactly one top-level locale key, found {key_count}")


class DocumentUnreadable(I18nError):
    """Raised when a document cannot be opened or decoded."""

    def __init__(self, path: str, cause: Optional[Exception] = None):
        self.path = path
        self.cause = cause
        super().__init__(f"Cannot read document {path}: {cause}")


class DetectionFailed(I18nError):
    """Raised when no default locale could be found for a workspace unit."""

    def __init__(self, unit_name: str):
        self.unit_name = unit_name
        super().__init__(f"No locale could be detected for workspace {unit_name}")


class UnresolvedUnit(I18nError):
    """Raised when a location belongs to no known workspace unit."""

    def __init__(self, path: Optional[str]):
        self.path = path
        super().__init__(f"no translation source found for this location: {path}")


class LoadPathsUnavailable(I18nError):
    """Raised when the declared load paths cannot be obtained from Rails."""

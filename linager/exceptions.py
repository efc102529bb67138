"""
Linager Exception Hierarchy

Centralized exception classes for structured error handling across the codebase.
All Linager-specific exceptions inherit from LinagerError.

Usage:
    from linager.exceptions import LinagerError, ParseError

    try:
        file = inspector.inspect_file(path)
    except ParseError as e:
        logger.error(f"Inspect failed: {e}")
"""


class LinagerError(Exception):
    """Base exception for all Linager errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} ({self.details})"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(LinagerError):
    """Error in Linager configuration."""

    pass


# =============================================================================
# Inspect Errors
# =============================================================================


class InspectError(LinagerError):
    """Base class for extraction errors."""

    pass


class ParseError(InspectError):
    """Source could not be parsed."""

    def __init__(self, path: str, message: str = "syntax error", line: int | None = None):
        details = {"path": path}
        if line is not None:
            details["line"] = line
        super().__init__(message, details)
        self.path = path
        self.line = line


class UnsupportedFileTypeError(InspectError):
    """No inspector is registered for a file extension."""

    def __init__(self, extension: str):
        super().__init__(f"unsupported file type: {extension}")
        self.extension = extension


# =============================================================================
# Edit Errors
# =============================================================================


class EditError(LinagerError):
    """Base class for structural edit errors."""

    pass


class NotFoundError(EditError):
    """A package, file, type or member named by an edit does not exist."""

    def __init__(self, kind: str, name: str):
        super().__init__(f"{kind} not found: {name}", {"kind": kind, "name": name})
        self.kind = kind
        self.name = name


# =============================================================================
# Storage Errors
# =============================================================================


class StorageError(LinagerError):
    """Base class for storage-related errors."""

    pass


class StoreError(StorageError):
    """Writing a project to disk failed."""

    def __init__(self, path: str, message: str):
        super().__init__(message, {"path": path})
        self.path = path


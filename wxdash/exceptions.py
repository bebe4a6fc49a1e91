"""Custom exception hierarchy for wxdash.

Exception Hierarchy:
    WxdashError (base)
    ├── StorageError - persisted layout records
    │   ├── StorageReadError
    │   └── StorageWriteError (retryable)
    ├── LayoutError - caller mistakes against the grid
    │   ├── UnknownWidgetError
    │   └── InvalidGeometryError
    ├── WorkspaceError
    │   └── WorkspaceNotFoundError
    └── ConfigurationError - settings / widget override file

Storage errors never reach the user: the layout store catches them and
degrades to the default template (reads) or drops the write (writes).

Usage:
    from wxdash.exceptions import StorageReadError

    try:
        data = json.loads(path.read_text())
    except json.JSONDecodeError as e:
        raise StorageReadError("Corrupt layout record", key=key) from e
"""

from typing import Any, Optional


class WxdashError(Exception):
    """Base exception for all wxdash errors.

    Attributes:
        message: Human-readable error description
        context: Additional context about the error (e.g., keys, ids)
        retryable: Whether this error might succeed on retry
    """

    def __init__(
        self,
        message: str,
        *,
        retryable: bool = False,
        **context: Any,
    ) -> None:
        self.message = message
        self.context = context
        self.retryable = retryable
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with context."""
        if self.context:
            context_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


# =============================================================================
# Storage Errors
# =============================================================================


class StorageError(WxdashError):
    """Base exception for persisted-record operations."""

    pass


class StorageReadError(StorageError):
    """A persisted record is missing, unreadable or malformed."""

    def __init__(
        self,
        message: str = "Failed to read stored record",
        *,
        key: Optional[str] = None,
        **context: Any,
    ) -> None:
        if key:
            context["key"] = key
        super().__init__(message, **context)


class StorageWriteError(StorageError):
    """A record could not be written (disk full, permissions) - retryable."""

    def __init__(
        self,
        message: str = "Failed to write record",
        *,
        key: Optional[str] = None,
        **context: Any,
    ) -> None:
        if key:
            context["key"] = key
        super().__init__(message, retryable=True, **context)


# =============================================================================
# Layout Errors
# =============================================================================


class LayoutError(WxdashError):
    """Base exception for grid layout operations."""

    pass


class UnknownWidgetError(LayoutError):
    """The widget id is not part of the layout or registry."""

    def __init__(self, widget_id: str, message: str = "Unknown widget", **context: Any) -> None:
        self.widget_id = widget_id
        super().__init__(message, widget_id=widget_id, **context)


class InvalidGeometryError(LayoutError):
    """Requested geometry is outside the grid (negative origin, empty size)."""

    pass


# =============================================================================
# Workspace Errors
# =============================================================================


class WorkspaceError(WxdashError):
    """Base exception for workspace operations."""

    pass


class WorkspaceNotFoundError(WorkspaceError):
    """No workspace exists with the given id."""

    def __init__(self, workspace_id: str, **context: Any) -> None:
        self.workspace_id = workspace_id
        super().__init__("Workspace not found", workspace_id=workspace_id, **context)


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(WxdashError):
    """Invalid configuration (environment or widget override file)."""

    def __init__(
        self,
        message: str = "Invalid configuration",
        *,
        path: Optional[str] = None,
        **context: Any,
    ) -> None:
        if path:
            context["path"] = path
        super().__init__(message, **context)

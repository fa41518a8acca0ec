from __future__ import annotations

from typing import Any, Dict, Mapping


class AppserverError(Exception):
    """Base exception for the appserver core."""

    context: Dict[str, Any]

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        if context is not None:
            # Store a shallow copy to avoid accidental mutation.
            self.context = dict(context)
        else:
            self.context = {}

    def to_json_error(self) -> Dict[str, Any]:
        """Return a JSON-serializable error payload."""
        return {
            "message": str(self),
            "code": self.__class__.__name__,
            "context": self.context,
        }


class MappingError(AppserverError, ValueError):
    """Raised when a source element cannot populate a declared node field."""

    def __init__(
        self,
        message: str,
        *,
        node_type: str | None = None,
        field: str | None = None,
        source: str | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        ctx = dict(context or {})
        if node_type:
            ctx["node_type"] = node_type
        if field:
            ctx["field"] = field
        if source:
            ctx["source"] = source
        AppserverError.__init__(self, message, context=ctx)
        ValueError.__init__(self, message)
        self.node_type = node_type
        self.field = field
        self.source = source


class ExtractionError(AppserverError, RuntimeError):
    """Raised when an archive cannot be soaked, flagged or unflagged."""

    def __init__(
        self,
        message: str,
        *,
        archive: str | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        ctx = dict(context or {})
        if archive:
            ctx["archive"] = archive
        AppserverError.__init__(self, message, context=ctx)
        RuntimeError.__init__(self, message)
        self.archive = archive


class ApplicationNotFoundError(AppserverError, LookupError):
    """Raised when an application primary key is unknown and absence is not allowed."""

    def __init__(self, message: str = "Application not found", *, uuid: str | None = None) -> None:
        AppserverError.__init__(self, message, context={"uuid": uuid} if uuid else None)
        LookupError.__init__(self, message)
        self.uuid = uuid


class ConfigurationError(AppserverError):
    """Raised when settings cannot be loaded or are malformed."""


__all__ = [
    "AppserverError",
    "MappingError",
    "ExtractionError",
    "ApplicationNotFoundError",
    "ConfigurationError",
]

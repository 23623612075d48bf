"""
Catalog Exception Hierarchy

Structured exception classes for the catalog data-access layer.
All exceptions include code, message, and details so the request layer can
map them to HTTP responses and the logs keep enough context for debugging.

Exception Hierarchy:
    CatalogError
    ├── NotFoundError
    ├── CatalogValidationError
    ├── StorageBackendError
    └── ExternalServiceError
"""
import logging
from typing import Optional, Dict, Any

logger = logging.getLogger(__name__)


class CatalogError(Exception):
    """
    Base exception for all catalog errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code for programmatic handling
        details: Additional context for debugging/audit
        severity: P0-P3 severity level
    """

    default_code: str = "CATALOG_ERROR"
    default_severity: str = "P2"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        severity: Optional[str] = None,
    ):
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}
        self.severity = severity or self.default_severity
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "severity": self.severity,
            "details": self.details,
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class NotFoundError(CatalogError):
    """Entity id does not exist."""
    default_code = "NOT_FOUND"
    default_severity = "P3"

    def __init__(
        self,
        resource: str,
        resource_id: Optional[Any] = None,
        message: Optional[str] = None,
        **kwargs
    ):
        details = kwargs.pop("details", {})
        details.update({
            "resource": resource,
            "resource_id": resource_id,
        })
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(message or f"{resource.capitalize()} not found", details=details, **kwargs)


class CatalogValidationError(CatalogError):
    """Malformed input: bad price pair, duplicate member, missing field."""
    default_code = "VALIDATION_FAILED"
    default_severity = "P3"

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        **kwargs
    ):
        details = kwargs.pop("details", {})
        details["field"] = field
        super().__init__(message, details=details, **kwargs)


class StorageBackendError(CatalogError):
    """Relational store unreachable or constraint violation."""
    default_code = "STORAGE_BACKEND_ERROR"
    default_severity = "P1"

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        **kwargs
    ):
        details = kwargs.pop("details", {})
        details["operation"] = operation
        super().__init__(message, details=details, **kwargs)


class ExternalServiceError(CatalogError):
    """Object storage call failed."""
    default_code = "EXTERNAL_SERVICE_ERROR"
    default_severity = "P2"

    def __init__(
        self,
        message: str,
        service: Optional[str] = None,
        keys: Optional[list] = None,
        **kwargs
    ):
        details = kwargs.pop("details", {})
        details.update({
            "service": service,
            "keys": keys or [],
        })
        super().__init__(message, details=details, **kwargs)


# HTTP status used by the request layer for each error type
HTTP_STATUS_BY_ERROR = {
    NotFoundError: 404,
    CatalogValidationError: 400,
    ExternalServiceError: 502,
    StorageBackendError: 500,
}


def http_status_for(error: CatalogError) -> int:
    """Resolve the HTTP status for a catalog error, walking the class hierarchy."""
    for cls in type(error).__mro__:
        if cls in HTTP_STATUS_BY_ERROR:
            return HTTP_STATUS_BY_ERROR[cls]
    return 500

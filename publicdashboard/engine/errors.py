"""
PublicDashboard Error Hierarchy — Structured exceptions for the admin console.

Every error carries its keyword context and serializes to JSON so the
controller layer can log it and turn it into a user-facing message.

Hierarchy:
    PublicDashboardError
    ├── DashboardNotFoundError    — Record id not present in the store
    ├── DashboardStoreError       — Store operation failed
    ├── DashboardValidationError  — Form input validation failed
    ├── SecurityTokenError        — CSRF token missing or invalid
    ├── ComponentRegistryError    — Invalid component registration
    └── DashboardConfigError      — Configuration error
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


class PublicDashboardError(Exception):
    """Base error for all PublicDashboard failures."""

    def __init__(self, message: str, **context: Any):
        self.message = message
        self.error_type: str = self.__class__.__name__
        self.record_id: Optional[int] = context.get("record_id")
        self.session_id: Optional[str] = context.get("session_id")
        self.context: Dict[str, Any] = context
        self.timestamp: str = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize error to a JSON-compatible dict for logging."""
        return {
            "error_type": self.error_type,
            "message": self.message,
            "record_id": self.record_id,
            "session_id": self.session_id,
            "timestamp": self.timestamp,
            "context": {
                k: str(v) for k, v in self.context.items()
                if k not in ("record_id", "session_id")
            },
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)

    def __repr__(self) -> str:
        parts = [f"{self.error_type}: {self.message}"]
        if self.record_id is not None:
            parts.append(f"record_id={self.record_id}")
        if self.session_id:
            parts.append(f"session_id={self.session_id}")
        return " | ".join(parts)


class DashboardNotFoundError(PublicDashboardError):
    """Requested dashboard id does not exist in the store."""
    pass


class DashboardStoreError(PublicDashboardError):
    """
    Store operation failed (create, update, delete, query).
    A failed paired update during a reorder surfaces here too.
    """

    def __init__(self, message: str, **context: Any):
        self.operation: Optional[str] = context.get("operation")
        super().__init__(message, **context)

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        d["operation"] = self.operation
        return d


class DashboardValidationError(PublicDashboardError):
    """Form input validation failed. Includes field-level error details."""

    def __init__(self, message: str, **context: Any):
        self.validation_errors: List[Dict[str, Any]] = context.get("validation_errors") or []
        super().__init__(message, **context)

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        d["validation_errors"] = self.validation_errors
        return d

    @property
    def fields(self) -> List[str]:
        """Names of the fields that failed validation."""
        return [str(err.get("field", "")) for err in self.validation_errors]


class SecurityTokenError(PublicDashboardError):
    """Invalid or missing security (CSRF) token for an admin action."""

    def __init__(self, message: str, **context: Any):
        self.action: Optional[str] = context.get("action")
        super().__init__(message, **context)


class ComponentRegistryError(PublicDashboardError):
    """Dashboard component could not be registered or loaded."""
    pass


class DashboardConfigError(PublicDashboardError):
    """Configuration error — invalid publicdashboard.yaml."""
    pass

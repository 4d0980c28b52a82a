"""
License DTOs for API responses.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

LICENSE_NOT_FOUND = "License not found"


@dataclass
class ValidationResultDTO:
    """DTO for a license validation result."""

    valid: bool
    status: Optional[str] = None
    email: Optional[str] = None
    expires_at: Optional[datetime] = None
    plugin_name: Optional[str] = None
    reason: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def not_found(cls) -> "ValidationResultDTO":
        """Result for a key the plugin never issued."""
        return cls(valid=False, error=LICENSE_NOT_FOUND)

    def to_response(self) -> Dict[str, Any]:
        """
        Render the public response body.

        Valid results expose the license; invalid ones only status and
        reason; unknown keys only the error.
        """
        if self.error:
            return {"valid": False, "error": self.error}
        if not self.valid:
            return {"valid": False, "status": self.status, "reason": self.reason}
        return {
            "valid": True,
            "status": self.status,
            "email": self.email,
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
            "plugin_name": self.plugin_name,
        }

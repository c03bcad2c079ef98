"""
Custom Exceptions for the School Self-Evaluation Tracker
========================================================

Every error raised by the services derives from SchoolEvalError, which
carries an HTTP status so the API layer can render it without extra mapping.

Usage:
    from school_eval.core.exceptions import ChecklistItemNotFoundError

    if not item:
        raise ChecklistItemNotFoundError(item_id)
"""

from typing import Optional, Any, Dict


class SchoolEvalError(Exception):
    """Base exception for all tracker errors"""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details
        }


# ============================================
# Validation Errors (400-type)
# ============================================

class BadRequestError(SchoolEvalError):
    """Required input is missing or malformed"""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="BAD_REQUEST", details=details)


# ============================================
# Resource Errors (404-type)
# ============================================

class NotFoundError(SchoolEvalError):
    """Base class for not found errors"""

    status_code = 404

    def __init__(self, resource_type: str, resource_id: Any):
        code = resource_type.upper().replace(" ", "_")
        super().__init__(
            f"{resource_type} with ID '{resource_id}' not found",
            code=f"{code}_NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": str(resource_id)}
        )


class StandardNotFoundError(NotFoundError):
    def __init__(self, standard_id: Any):
        super().__init__("Standard", standard_id)


class IndicatorNotFoundError(NotFoundError):
    def __init__(self, indicator_id: Any):
        super().__init__("Indicator", indicator_id)


class ChecklistItemNotFoundError(NotFoundError):
    def __init__(self, item_id: Any):
        super().__init__("Checklist item", item_id)


class EvidenceNotFoundError(NotFoundError):
    def __init__(self, evidence_id: Any):
        super().__init__("Evidence", evidence_id)


class UserNotFoundError(NotFoundError):
    def __init__(self, user_id: Any):
        super().__init__("User", user_id)


class SeedDatasetNotFoundError(NotFoundError):
    """Seed dataset file does not exist - aborts the whole import"""

    def __init__(self, path: str):
        SchoolEvalError.__init__(
            self,
            f"Seed file not found: {path}",
            code="SEED_DATASET_NOT_FOUND",
            details={"path": str(path)}
        )


# ============================================
# Configuration Errors
# ============================================

class ConfigError(SchoolEvalError):
    """Required configuration (e.g. Drive credentials) is absent"""

    def __init__(self, message: str, missing: Optional[list] = None):
        super().__init__(message, code="CONFIG_ERROR")
        if missing:
            self.details["missing"] = missing


# ============================================
# Storage Errors
# ============================================

class StorageError(SchoolEvalError):
    """Storage operation failed"""

    def __init__(self, message: str, backend: Optional[str] = None):
        super().__init__(message, code="STORAGE_ERROR")
        if backend:
            self.details["backend"] = backend


class UploadError(StorageError):
    """Backend rejected or did not acknowledge a write"""

    status_code = 502

    def __init__(self, message: str = "Upload failed", backend: Optional[str] = None):
        super().__init__(f"Failed to upload evidence: {message}", backend)
        self.code = "UPLOAD_FAILED"


class DeleteError(StorageError):
    """Backend failed to remove a blob for a reason other than already-absent"""

    def __init__(self, message: str = "Delete failed", backend: Optional[str] = None):
        super().__init__(f"Failed to delete evidence: {message}", backend)
        self.code = "DELETE_FAILED"


# ============================================
# Helper function for API responses
# ============================================

def error_response(error: SchoolEvalError) -> Dict[str, Any]:
    """Convert exception to API error response format"""
    return {
        "success": False,
        "error": error.to_dict()
    }

"""
Custom Exceptions for RoomRoster
================================

Services raise these instead of HTTPException so the same rules apply
whether an operation is driven by an endpoint, the seed script or a test.
The API layer turns them into JSON responses (see app.main).

Usage:
    from app.core.exceptions import RoomNotFoundError, CapacityExceededError

    if not room:
        raise RoomNotFoundError(room_id)

    if requested > available:
        raise CapacityExceededError(
            f"Room {room.name} is full", available=available, requested=requested
        )
"""

from typing import Optional, Any, Dict


class RoomRosterError(Exception):
    """Base exception for all RoomRoster errors"""

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
# Authentication Errors
# ============================================

class AuthenticationError(RoomRosterError):
    """User authentication failed"""

    status_code = 401

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message, code="AUTH_FAILED")


class InactiveAccountError(AuthenticationError):
    """Account exists but has been deactivated"""

    status_code = 403

    def __init__(self):
        super().__init__("Account is deactivated")
        self.code = "ACCOUNT_INACTIVE"


# ============================================
# Resource Errors (404-type)
# ============================================

class ResourceNotFoundError(RoomRosterError):
    """Base class for not found errors"""

    status_code = 404

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} not found",
            code=f"{resource_type.upper().replace(' ', '_')}_NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": resource_id}
        )


class ProfileNotFoundError(ResourceNotFoundError):
    def __init__(self, profile_id: str):
        super().__init__("Profile", profile_id)


class GroupNotFoundError(ResourceNotFoundError):
    def __init__(self, group_id: str):
        super().__init__("Group", group_id)


class RoomNotFoundError(ResourceNotFoundError):
    def __init__(self, room_id: str):
        super().__init__("Room", room_id)


class NotificationNotFoundError(ResourceNotFoundError):
    def __init__(self, notification_id: str):
        super().__init__("Notification", notification_id)


class UserNotFoundError(ResourceNotFoundError):
    def __init__(self, user_id: str):
        super().__init__("User", user_id)


# ============================================
# Validation Errors (400-type)
# ============================================

class ValidationError(RoomRosterError):
    """Input validation failed"""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class InvalidFileTypeError(ValidationError):
    """File type not allowed"""

    def __init__(self, file_type: str, allowed_types: list):
        super().__init__(
            f"Invalid file type '{file_type}'. Allowed: {', '.join(allowed_types)}"
        )
        self.code = "INVALID_FILE_TYPE"
        self.details = {"file_type": file_type, "allowed_types": allowed_types}


class FileTooLargeError(ValidationError):
    """Uploaded file exceeds the configured size limit"""

    status_code = 413

    def __init__(self, size: int, max_size: int):
        super().__init__(
            f"File too large. Maximum size is {max_size // (1024 * 1024)}MB"
        )
        self.code = "FILE_TOO_LARGE"
        self.details = {"size": size, "max_size": max_size}


# ============================================
# Conflict / Capacity Errors
# ============================================

class ConflictError(RoomRosterError):
    """Request conflicts with the current state (duplicates, already assigned)"""

    status_code = 409

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="CONFLICT", details=details)


class CapacityExceededError(RoomRosterError):
    """Admission would push a room past its max_capacity"""

    status_code = 400

    def __init__(self, message: str, available: int, requested: int):
        super().__init__(
            message,
            code="CAPACITY_EXCEEDED",
            details={
                "available": available,
                "requested": requested,
                "shortfall": max(requested - available, 0),
            }
        )


# ============================================
# Storage Errors
# ============================================

class StorageError(RoomRosterError):
    """Local file storage operation failed"""

    def __init__(self, message: str):
        super().__init__(message, code="STORAGE_ERROR")


# ============================================
# Helper function for API responses
# ============================================

def error_response(error: RoomRosterError) -> Dict[str, Any]:
    """Convert exception to API error response format"""
    return {
        "success": False,
        "message": error.message,
        "code": error.code,
        "details": error.details,
    }

"""Domain exceptions for the Taskflow application.

Defines domain-level exceptions that represent business rule violations:
guard failures, illegal state transitions, and missing resources. These
exceptions are independent of infrastructure concerns. The presentation
layer maps them to HTTP responses in exception handlers via error_code.
"""

from typing import Any


class TaskflowException(Exception):
    """Base exception for all Taskflow application errors.

    All custom exceptions inherit from this class to allow consistent
    error handling and logging. Presentation layer maps these to HTTP
    responses using message, error_code, and details.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, resource_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for an API error body."""
        body: dict[str, Any] = {"error": self.error_code, "message": self.message}
        if self.details:
            body["details"] = self.details
        return body


class ValidationException(TaskflowException):
    """Raised when input validation fails (e.g. empty description, bad duration)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class AuthenticationException(TaskflowException):
    """Raised when authentication fails (e.g. invalid credentials or token)."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message, "AUTHENTICATION_ERROR")


class AuthorizationException(TaskflowException):
    """Raised when the actor may not perform the operation (Forbidden)."""

    def __init__(
        self,
        resource: str | None = None,
        action: str | None = None,
        message: str = "Permission denied",
    ) -> None:
        """Initialize with optional resource, action, and message.

        Args:
            resource: Optional resource type (e.g. 'task', 'role').
            action: Optional action that was attempted (e.g. 'approve', 'forward').
            message: Human-readable message; used as-is when resource/action omitted.
        """
        if resource and action and message == "Permission denied":
            message = f"Permission denied: {action} on {resource}"
        details: dict[str, Any] = {}
        if resource:
            details["resource"] = resource
        if action:
            details["action"] = action
        super().__init__(message, "PERMISSION_DENIED", details)


class ResourceNotFoundException(TaskflowException):
    """Raised when a requested resource is not found or not visible to the actor."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'task', 'role', 'user').
            resource_id: The ID that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class InvalidStateTransitionException(TaskflowException):
    """Raised when the requested transition is not allowed from the current status."""

    def __init__(self, current: str, requested: str, message: str | None = None) -> None:
        super().__init__(
            message or f"Cannot move task from '{current}' to '{requested}'",
            "INVALID_STATE_TRANSITION",
            {"current": current, "requested": requested},
        )


class AlreadyInTargetStateException(TaskflowException):
    """Raised when the task is already in the requested state (e.g. approved twice)."""

    def __init__(self, state: str) -> None:
        super().__init__(
            f"Task is already '{state}'",
            "ALREADY_IN_TARGET_STATE",
            {"state": state},
        )


class TaskVersionConflictException(TaskflowException):
    """Raised when a concurrent writer changed the task between load and save."""

    def __init__(self, task_id: str, expected_version: int) -> None:
        super().__init__(
            f"Task {task_id} was modified concurrently",
            "TASK_VERSION_CONFLICT",
            {"task_id": task_id, "expected_version": expected_version},
        )


class RoleInUseException(TaskflowException):
    """Raised when deleting a role that users still hold."""

    def __init__(self, role_name: str, user_count: int) -> None:
        super().__init__(
            f"Role '{role_name}' is assigned to {user_count} user(s)",
            "ROLE_IN_USE",
            {"role": role_name, "user_count": user_count},
        )


class RoleAlreadyExistsException(TaskflowException):
    """Raised when creating a role whose name is taken."""

    def __init__(self, name: str) -> None:
        super().__init__(
            f"Role already exists: {name}", "ROLE_ALREADY_EXISTS", {"name": name}
        )


class UserAlreadyExistsException(TaskflowException):
    """Raised when creating a user whose email or WhatsApp number is taken."""

    def __init__(self, contact: str) -> None:
        super().__init__(
            f"User already exists: {contact}",
            "USER_ALREADY_EXISTS",
            {"contact": contact},
        )


class SqlNotConfiguredException(TaskflowException):
    """Raised when an operation requires Postgres but DATABASE_URL is not set."""

    def __init__(self) -> None:
        super().__init__(
            message="This operation requires a SQL database that is not configured.",
            error_code="SERVICE_UNAVAILABLE",
        )

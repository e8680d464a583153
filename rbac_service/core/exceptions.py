"""
Domain exceptions.

Services and the authorization gate raise these instead of
`HTTPException` so the core stays usable outside a request.  The
handlers in `rbac_service.core.error_handlers` turn each one into a
JSON response at the HTTP boundary.
"""

from typing import Any


class RBACError(Exception):
    """Base class for every failure the core reports to its caller."""

    status_code: int = 500
    message: str = "An unexpected error occurred."

    def __init__(self, message: str | None = None, **details: Any) -> None:
        self.message = message or self.message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message, **self.details}


class Unauthenticated(RBACError):
    """No resolved user identity on the request."""

    status_code = 401
    message = "Unauthenticated."


class Unauthorized(RBACError):
    """The user's role lacks the permission the operation requires."""

    status_code = 403
    message = "You do not have permission to perform this action."

    def __init__(self, required_permission: str) -> None:
        super().__init__(required_permission=required_permission)
        self.required_permission = required_permission


class NotFound(RBACError):
    status_code = 404

    def __init__(self, entity_kind: str, entity_id: Any) -> None:
        super().__init__(
            f"{entity_kind.capitalize()} {entity_id} not found.",
            entity=entity_kind,
            id=entity_id,
        )
        self.entity_kind = entity_kind
        self.entity_id = entity_id


class DuplicateName(RBACError):
    status_code = 409

    def __init__(self, entity_kind: str, name: str) -> None:
        super().__init__(
            f"A {entity_kind} named '{name}' already exists.",
            entity=entity_kind,
            name=name,
        )
        self.entity_kind = entity_kind
        self.name = name


class InUse(RBACError):
    """Role delete attempted while users still reference the role."""

    status_code = 409

    def __init__(self, role_id: int, user_count: int) -> None:
        super().__init__(
            f"Role {role_id} is still assigned to {user_count} user(s).",
            role_id=role_id,
        )
        self.role_id = role_id
        self.user_count = user_count


class StoreFailure(RBACError):
    """The underlying store failed.  Never retried here."""

    status_code = 503
    message = "Service temporarily unavailable."


class ValidationFailed(RBACError):
    """A field value the core refuses, reported per field like a form error."""

    status_code = 422

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message, errors={field: [message]})
        self.field = field


class InvalidCurrentPassword(ValidationFailed):
    """Password change attempted with the wrong current password."""

    def __init__(self) -> None:
        super().__init__("current_password", "Current password is incorrect.")

"""Exception taxonomy for the occupancy core.

Every :class:`OccupyError` carries a message that can be shown to the user as
is. :class:`StoreError` and :class:`CatalogLoadError` are operational
failures: they are logged and replaced by a generic message at the edge.
"""

from __future__ import annotations

from datetime import datetime

from pal_occupy.formatting import timestamp


class OccupyError(Exception):
    """A rejected request; ``str(exc)`` is user-facing."""


# --- Validation -----------------------------------------------------------------


class ValidationError(OccupyError):
    """Missing or invalid input; nothing was changed."""


class UnknownPointError(ValidationError):
    def __init__(self, point_id: int) -> None:
        self.point_id = point_id
        super().__init__(f"Point {point_id} does not exist.")


class TokenParseError(ValidationError):
    """An action token had the wrong number or type of arguments."""


class TokenTooLongError(TokenParseError):
    def __init__(self, token: str, limit: int) -> None:
        self.token = token
        self.limit = limit
        super().__init__(f"Action token is {len(token)} characters; the limit is {limit}.")


class UnknownActionError(ValidationError):
    def __init__(self, action: str) -> None:
        self.action = action
        super().__init__("Unknown command.")


class PermissionDeniedError(ValidationError):
    def __init__(self, message: str = "You do not have permission to do that.") -> None:
        super().__init__(message)


# --- Conflicts ------------------------------------------------------------------


class ConflictError(OccupyError):
    """The request contradicts the current state; not retried."""


class CategoryConflictError(ConflictError):
    def __init__(self, point_id: int) -> None:
        self.point_id = point_id
        super().__init__(
            "You already hold or are challenging a point of the same category."
        )


class LeaseActiveError(ConflictError):
    def __init__(self, point_id: int, due_time: datetime) -> None:
        self.point_id = point_id
        self.due_time = due_time
        super().__init__(
            "This point is already occupied. A challenge can be registered "
            f"{timestamp(due_time, 'R')} ({timestamp(due_time, 'F')})."
        )


class ChallengePendingError(ConflictError):
    def __init__(self, point_id: int) -> None:
        self.point_id = point_id
        super().__init__("A challenge has already been registered for this point.")


class RaceLostError(ConflictError):
    def __init__(self, point_id: int) -> None:
        self.point_id = point_id
        super().__init__("Someone else claimed this point at the same moment. Please try again.")


# --- Not found ------------------------------------------------------------------


class NotFoundError(OccupyError):
    """The request refers to context or state that does not exist."""


class MissingTenantError(NotFoundError):
    def __init__(self) -> None:
        super().__init__("This command can only be used inside a server.")


class NoPendingChallengeError(NotFoundError):
    def __init__(self, point_id: int) -> None:
        self.point_id = point_id
        super().__init__("There is no pending challenge on this point.")


# --- Operational ----------------------------------------------------------------


class StoreError(Exception):
    """The store could not complete an operation; the transaction was rolled back."""


class RecordConflictError(StoreError):
    """An insert hit the (tenant, point) uniqueness constraint."""

    def __init__(self, tenant_id: int, point_id: int) -> None:
        self.tenant_id = tenant_id
        self.point_id = point_id
        super().__init__(f"occupancy for tenant {tenant_id} point {point_id} already exists")


class CatalogLoadError(Exception):
    """The reference catalog could not be loaded; the process must not start."""

"""Who is asking, and where."""

from __future__ import annotations

from dataclasses import dataclass

from pal_occupy.domain.errors import MissingTenantError, PermissionDeniedError


@dataclass(frozen=True, slots=True)
class InteractionContext:
    """Caller information extracted from an inbound event.

    ``tenant_id`` is None for direct messages. ``is_privileged`` is decided by
    the adapter (Manage Guild on Discord); the core only reads the flag.
    """

    tenant_id: int | None
    user_id: int
    channel_id: int
    is_privileged: bool = False

    def require_tenant(self) -> int:
        if self.tenant_id is None:
            raise MissingTenantError()
        return self.tenant_id

    def require_privilege(self) -> None:
        if not self.is_privileged:
            raise PermissionDeniedError()

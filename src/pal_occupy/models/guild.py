"""Per-guild settings and the command audit log."""

from sqlalchemy import BigInteger, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampCreatedMixin, TimestampMixin


class NotifyRole(Base, TimestampMixin):
    """Role mentioned when a challenge is registered in a guild.

    Attributes:
        tenant_id: Guild id (one row per guild, last write wins)
        role_id: Role to mention
    """

    __tablename__ = "notify_roles"

    tenant_id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    role_id: Mapped[int] = mapped_column(BigInteger, nullable=False)

    def __repr__(self) -> str:
        return f"<NotifyRole(tenant={self.tenant_id}, role={self.role_id})>"


class CommandLog(Base, TimestampCreatedMixin):
    """Append-only record of an invoked command.

    Attributes:
        id: Primary key
        tenant_id: Guild the command ran in (NULL for direct messages)
        channel_id: Channel the command ran in
        user_id: Invoking user
        content: Invocation string as typed
    """

    __tablename__ = "command_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    tenant_id: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    channel_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    user_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)

    __table_args__ = (Index("idx_command_logs_tenant", "tenant_id"),)

    def __repr__(self) -> str:
        return f"<CommandLog(id={self.id}, user={self.user_id}, content='{self.content}')>"

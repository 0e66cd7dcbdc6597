"""Reply Sink Protocol Interface.

The router and the command handlers never talk to a chat client directly;
they hand :class:`~pal_occupy.interaction.replies.Reply` values to a sink.
"""

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from pal_occupy.interaction.replies import Reply


class ReplySink(Protocol):
    """Protocol for delivering replies to the interaction that caused them.

    An interaction must be acknowledged once, quickly; everything after the
    first acknowledgement is a follow-up. Implementations track that state.
    """

    async def defer(self, *, ephemeral: bool = True) -> None:
        """Acknowledge now and deliver the real reply later.

        Args:
            ephemeral: Whether the eventual reply is only visible to the caller
        """
        ...

    async def send(self, reply: "Reply") -> None:
        """Deliver a reply.

        NEW replies become a response, or a follow-up once acknowledged. UPDATE
        replies edit the message the triggering button belongs to.
        """
        ...

"""Action tokens, reply models and the handlers that turn interactions into replies.

Only the dependency-free pieces are re-exported here; import the router and
the command handlers from their modules.
"""

from pal_occupy.interaction.components import Button, ButtonStyle, pack_rows
from pal_occupy.interaction.tokens import Action, ActionToken, PageCursor, parse_token

__all__ = [
    "Action",
    "ActionToken",
    "Button",
    "ButtonStyle",
    "PageCursor",
    "pack_rows",
    "parse_token",
]

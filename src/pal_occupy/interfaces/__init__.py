"""Protocol-based interfaces for the pal-occupy adapters.

Adapters implement these; tests inject protocol-based fakes.
"""

from pal_occupy.interfaces.messaging import ReplySink

__all__ = ["ReplySink"]

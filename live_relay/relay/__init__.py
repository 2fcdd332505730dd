"""Per-connection relay between a client WebSocket and an upstream live session."""

from .loop import RelayLoop
from .state import RelayState
from .outbound import OutboundQueue

__all__ = ["OutboundQueue", "RelayLoop", "RelayState"]

from .broker import SessionBroker
from .channel import UpstreamChannel

__all__ = ["SessionBroker", "UpstreamChannel"]

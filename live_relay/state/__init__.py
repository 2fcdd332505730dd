from .runtime import RuntimeDeps
from .settings import AppSettings
from .session import UpstreamSession
from .token import TokenRecord

__all__ = ["AppSettings", "RuntimeDeps", "TokenRecord", "UpstreamSession"]

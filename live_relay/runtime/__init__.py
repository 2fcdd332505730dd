"""Runtime package.

Keep this module dependency-light: importing `live_relay.runtime.*` from unit
tests should not resolve credentials or open network connections.
"""

__all__: list[str] = []

"""WebSocket connection handling."""

__all__: list[str] = []

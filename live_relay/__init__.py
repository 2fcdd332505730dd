"""Real-time relay gateway between WebSocket clients and Google live AI sessions."""

__all__: list[str] = []

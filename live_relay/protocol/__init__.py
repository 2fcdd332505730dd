from .gemini import GeminiLiveTranslator
from .vertex import VertexLiveTranslator
from .registry import build_translator, build_session_config
from .translator import ProtocolTranslator

__all__ = [
    "GeminiLiveTranslator",
    "ProtocolTranslator",
    "VertexLiveTranslator",
    "build_session_config",
    "build_translator",
]

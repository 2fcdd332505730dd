"""Protocol translator interface shared by every upstream variant."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Literal

from live_relay.state.settings import SessionConfig

from .envelope import Envelope

UpstreamFrame = dict[str, Any]
SessionSetup = Literal["http", "in_band"]


class ProtocolTranslator(ABC):
    """Pure mapping between client envelopes and one upstream wire schema.

    Implementations hold only static configuration and never perform I/O.
    ``session_setup`` tells the session broker where the create body goes:
    ``"http"`` POSTs it before the stream opens, ``"in_band"`` sends it as the
    first stream frame.
    """

    name: str = ""
    session_setup: SessionSetup = "http"

    @abstractmethod
    def to_upstream_create_body(self, config: SessionConfig) -> UpstreamFrame:
        """Build the session creation payload."""

    @abstractmethod
    def to_upstream_frame(self, envelope: Envelope) -> UpstreamFrame:
        """Translate a client ``text``/``audio`` envelope; raise ``UnsupportedEnvelope`` otherwise."""

    @abstractmethod
    def from_upstream_frame(self, frame: UpstreamFrame) -> list[Envelope]:
        """Translate one upstream frame into zero or more client envelopes."""


__all__ = ["ProtocolTranslator", "SessionSetup", "UpstreamFrame"]

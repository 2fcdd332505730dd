"""Cached upstream bearer token."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class TokenRecord:
    value: str
    expires_at: float  # epoch seconds

    def is_fresh(self, now: float, *, skew_s: float = 0.0) -> bool:
        return bool(self.value) and (self.expires_at - skew_s) > now


__all__ = ["TokenRecord"]

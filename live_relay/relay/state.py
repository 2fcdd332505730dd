"""Relay lifecycle states and the transitions allowed between them."""

from __future__ import annotations

import enum


class RelayState(enum.Enum):
    CONNECTING = "connecting"
    ACTIVE = "active"
    DRAINING = "draining"
    CLOSED = "closed"
    FAILED = "failed"

    @property
    def terminal(self) -> bool:
        return self in (RelayState.CLOSED, RelayState.FAILED)


ALLOWED_TRANSITIONS: dict[RelayState, frozenset[RelayState]] = {
    RelayState.CONNECTING: frozenset({RelayState.ACTIVE, RelayState.DRAINING, RelayState.FAILED}),
    RelayState.ACTIVE: frozenset({RelayState.DRAINING, RelayState.FAILED}),
    RelayState.DRAINING: frozenset({RelayState.CLOSED, RelayState.FAILED}),
    RelayState.CLOSED: frozenset(),
    RelayState.FAILED: frozenset(),
}


def can_transition(current: RelayState, target: RelayState) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


__all__ = ["ALLOWED_TRANSITIONS", "RelayState", "can_transition"]

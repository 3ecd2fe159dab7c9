"""Finite state machine for the add-garment flow."""

from __future__ import annotations

import logging
from enum import Enum

logger = logging.getLogger(__name__)


class StagingError(RuntimeError):
    """Raised when the add flow is driven out of order."""


class AddFlowState(str, Enum):
    """Stages a new garment passes through before it reaches the wardrobe."""

    IDLE = "idle"
    ACQUIRING = "acquiring"
    CLASSIFYING = "classifying"
    STAGED = "staged"
    COMMITTED = "committed"
    DISCARDED = "discarded"


_TRANSITIONS: dict[AddFlowState, frozenset[AddFlowState]] = {
    AddFlowState.IDLE: frozenset({AddFlowState.ACQUIRING}),
    AddFlowState.ACQUIRING: frozenset(
        {AddFlowState.CLASSIFYING, AddFlowState.DISCARDED, AddFlowState.IDLE},
    ),
    AddFlowState.CLASSIFYING: frozenset({AddFlowState.STAGED, AddFlowState.DISCARDED}),
    AddFlowState.STAGED: frozenset({AddFlowState.COMMITTED, AddFlowState.DISCARDED}),
    AddFlowState.COMMITTED: frozenset({AddFlowState.IDLE}),
    AddFlowState.DISCARDED: frozenset({AddFlowState.IDLE}),
}


class AddFlowStateMachine:
    """Tracks the single in-flight add flow.

    Each started flow gets a token; discarding bumps the token so that a
    classification finishing afterwards can tell it has been cancelled.
    """

    def __init__(self) -> None:
        self._state = AddFlowState.IDLE
        self._token = 0

    @property
    def current(self) -> AddFlowState:
        return self._state

    @property
    def token(self) -> int:
        return self._token

    def is_current(self, token: int) -> bool:
        return token == self._token

    def advance(self, state: AddFlowState) -> None:
        """Move to ``state``, rejecting transitions the flow does not allow."""

        if state not in _TRANSITIONS[self._state]:
            raise StagingError(f"Cannot move add flow from {self._state.value} to {state.value}.")
        logger.debug("Add flow %d: %s -> %s", self._token, self._state.value, state.value)
        self._state = state

    def start(self) -> int:
        """Cancel whatever is in flight and begin a new flow; returns its token."""

        self.discard()
        self._token += 1
        self.advance(AddFlowState.ACQUIRING)
        return self._token

    def discard(self) -> None:
        """Drop the in-flight flow, if any, and return to idle."""

        if self._state is AddFlowState.IDLE:
            return
        if AddFlowState.DISCARDED in _TRANSITIONS[self._state]:
            self.advance(AddFlowState.DISCARDED)
        self._token += 1
        self._state = AddFlowState.IDLE

    def finish(self) -> None:
        """Record a commit and return to idle."""

        self.advance(AddFlowState.COMMITTED)
        self.advance(AddFlowState.IDLE)

    def abort(self) -> None:
        """Return to idle after image acquisition failed."""

        self.advance(AddFlowState.IDLE)

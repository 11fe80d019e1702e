from __future__ import annotations

from enum import Enum
from typing import Iterator


class CharState(str, Enum):
    UNTYPED = "untyped"
    CORRECT = "correct"
    INCORRECT = "incorrect"
    CORRECTED = "corrected"


class CharacterLedger:
    """Per-position correctness record for the active passage.

    Besides the visible state, each position remembers whether it was ever
    marked incorrect while this passage was active, so that a position typed
    correctly after a correction ends up ``CORRECTED`` instead of ``CORRECT``.
    """

    def __init__(self, length: int = 0) -> None:
        if length < 0:
            raise ValueError(f"ledger length must be >= 0, got {length}")
        self._states: list[CharState] = [CharState.UNTYPED] * length
        self._had_error: list[bool] = [False] * length

    def __len__(self) -> int:
        return len(self._states)

    def __getitem__(self, index: int) -> CharState:
        return self._states[index]

    def __iter__(self) -> Iterator[CharState]:
        return iter(self._states)

    def states(self) -> list[CharState]:
        return list(self._states)

    def had_error(self, index: int) -> bool:
        return self._had_error[index]

    def mark_match(self, index: int) -> CharState:
        """Record matching input at *index*; returns the resulting state."""
        state = CharState.CORRECTED if self._had_error[index] else CharState.CORRECT
        self._states[index] = state
        return state

    def mark_mismatch(self, index: int) -> CharState:
        self._states[index] = CharState.INCORRECT
        self._had_error[index] = True
        return CharState.INCORRECT

    def clear(self, index: int) -> CharState:
        """Rewind *index* to untyped; returns the state it had before."""
        previous = self._states[index]
        self._states[index] = CharState.UNTYPED
        return previous

    def has_incorrect_before(self, index: int) -> bool:
        """True if any position in ``[0, index)`` is still incorrect."""
        return any(state is CharState.INCORRECT for state in self._states[:index])

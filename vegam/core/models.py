"""Session data models shared by the controller, the reducer and the UI."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from vegam.core.ledger import CharacterLedger


class Language(str, Enum):
    ALPHABETIC = "alphabetic"
    IDEOGRAPHIC = "ideographic"


class SessionStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    FINISHED = "finished"


class SessionEvent(str, Enum):
    """What changed; passed to controller listeners after each mutation."""

    STARTED = "started"
    TICK = "tick"
    INPUT = "input"
    ROTATED = "rotated"
    FINISHED = "finished"
    RESET = "reset"
    LANGUAGE = "language"


@dataclass(frozen=True)
class Passage:
    """Immutable block of target units for one round.

    A unit is one display character; in alphabetic passages the space after
    every word is a unit of its own.
    """

    units: tuple[str, ...]
    language: Language

    def __len__(self) -> int:
        return len(self.units)

    def __getitem__(self, index: int) -> str:
        return self.units[index]

    @property
    def text(self) -> str:
        return "".join(self.units)


@dataclass
class SessionTotals:
    """Counters accumulated over every passage of a session."""

    total_typed: int = 0
    errors: int = 0


@dataclass(frozen=True)
class SessionStats:
    wpm: int
    accuracy: int
    errors: int
    total_typed: int
    elapsed_seconds: int
    remaining_seconds: int


@dataclass
class Session:
    """The single mutable typing session owned by a ``SessionController``."""

    language: Language
    remaining_seconds: int
    status: SessionStatus = SessionStatus.IDLE
    passage: Optional[Passage] = None
    ledger: CharacterLedger = field(default_factory=CharacterLedger)
    cursor: int = 0
    totals: SessionTotals = field(default_factory=SessionTotals)

    @property
    def is_running(self) -> bool:
        return self.status is SessionStatus.RUNNING

    def load_passage(self, passage: Passage) -> None:
        """Install *passage* with a fresh ledger and the cursor at 0."""
        self.passage = passage
        self.ledger = CharacterLedger(len(passage))
        self.cursor = 0

    def clear_passage(self) -> None:
        self.passage = None
        self.ledger = CharacterLedger()
        self.cursor = 0

    def current_target(self) -> Optional[str]:
        if self.passage is None or self.cursor >= len(self.passage):
            return None
        return self.passage[self.cursor]

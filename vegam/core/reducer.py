from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Optional

from vegam.core.ledger import CharState
from vegam.core.models import Language, Session

logger = logging.getLogger(__name__)


class InputReducer:
    """Turns committed input units into ledger and cursor mutations.

    Errors must be fixed strictly left to right: while any position before
    the cursor is incorrect, new submissions are ignored and only a
    correction is accepted. Every operation is a silent no-op unless the
    session is running.

    Corrections differ by mode. Alphabetic typing may only rewind over an
    incorrect character; ideographic typing rewinds one position whatever
    its state.
    """

    def __init__(
        self,
        session: Session,
        on_input: Optional[Callable[[], None]] = None,
        on_passage_end: Optional[Callable[[], None]] = None,
    ) -> None:
        self._session = session
        self._on_input = on_input
        self._on_passage_end = on_passage_end

    def submit_character(self, key: str) -> bool:
        """Compare a single key press against the current target."""
        if len(key) != 1:
            return False
        return self._submit(key)

    def submit_composed_unit(self, text: str) -> bool:
        """Compare a whole IME commit against the current target character."""
        if not text:
            return False
        return self._submit(text)

    def request_correction(self) -> bool:
        """Rewind the cursor by one position; returns True if it moved."""
        session = self._session
        if not session.is_running or session.cursor <= 0:
            return False
        target = session.cursor - 1
        if session.language is Language.ALPHABETIC:
            if session.ledger[target] is not CharState.INCORRECT:
                return False
            if session.ledger.has_incorrect_before(target):
                logger.debug("Correction at %d rejected: earlier error pending", target)
                return False

        session.cursor = target
        previous = session.ledger.clear(target)
        if previous is CharState.INCORRECT:
            session.totals.errors -= 1
        session.totals.total_typed -= 1
        self._notify_input()
        return True

    def _submit(self, text: str) -> bool:
        session = self._session
        if not session.is_running:
            return False
        expected = session.current_target()
        if expected is None:
            return False
        if session.ledger.has_incorrect_before(session.cursor):
            logger.debug("Input %r ignored at %d: uncorrected error", text, session.cursor)
            return False

        if text == expected:
            session.ledger.mark_match(session.cursor)
        else:
            session.ledger.mark_mismatch(session.cursor)
            session.totals.errors += 1
        session.totals.total_typed += 1
        session.cursor += 1

        if session.cursor >= len(session.ledger) and self._on_passage_end is not None:
            self._on_passage_end()
        self._notify_input()
        return True

    def _notify_input(self) -> None:
        if self._on_input is not None:
            self._on_input()


class CompositionState(str, Enum):
    IDLE = "idle"
    COMPOSING = "composing"


class CompositionBuffer:
    """Holds IME pre-edit text until the composition is committed.

    Pre-edit updates never reach the reducer; a commit is submitted exactly
    once as a single composed unit. Text arriving while idle was not composed
    and is submitted straight away.
    """

    def __init__(self, reducer: InputReducer) -> None:
        self._reducer = reducer
        self._state = CompositionState.IDLE
        self._buffer = ""

    @property
    def state(self) -> CompositionState:
        return self._state

    @property
    def pending(self) -> str:
        return self._buffer

    def begin(self) -> None:
        self._state = CompositionState.COMPOSING
        self._buffer = ""

    def update(self, text: str) -> None:
        if self._state is CompositionState.COMPOSING:
            self._buffer = text

    def commit(self, text: str) -> bool:
        """End the composition (if any) and submit *text* as one unit."""
        self._state = CompositionState.IDLE
        self._buffer = ""
        return self._reducer.submit_composed_unit(text)

    def cancel(self) -> None:
        self._state = CompositionState.IDLE
        self._buffer = ""

from __future__ import annotations

import logging
import math
import random
from typing import Callable, List, Optional

from vegam.core.models import (
    Language,
    Session,
    SessionEvent,
    SessionStats,
    SessionStatus,
)
from vegam.core.reducer import CompositionBuffer, InputReducer
from vegam.core.settings import Settings
from vegam.core.vocabulary import Vocabulary, generate_passage

logger = logging.getLogger(__name__)

Listener = Callable[[SessionEvent], None]


class NotReadyError(RuntimeError):
    """Start was requested before a vocabulary for the language was loaded."""


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compute_wpm(total_typed: int, language: Language, elapsed_seconds: float, chars_per_word: int = 5) -> int:
    """Words per minute over the elapsed part of the countdown.

    Alphabetic text counts ``chars_per_word`` characters as one word;
    ideographic text counts every character as a word.
    """
    elapsed_minutes = elapsed_seconds / 60.0
    if elapsed_minutes <= 0:
        return 0
    if language is Language.ALPHABETIC:
        words = round_half_up(total_typed / chars_per_word)
    else:
        words = total_typed
    return round_half_up(words / elapsed_minutes)


def compute_accuracy(total_typed: int, errors: int) -> int:
    """Percentage of typed characters that are not errors; 0 when nothing typed."""
    if total_typed <= 0:
        return 0
    return round_half_up((total_typed - errors) / total_typed * 100)


class SessionController:
    """Owns the single typing session: lifecycle, countdown and stats.

    The countdown is driven by a *ticker*, any object with
    ``start(interval_ms, callback)`` and ``stop()``; the UI passes a Qt timer
    wrapper, tests pass one they can fire by hand.
    """

    def __init__(
        self,
        settings: Settings,
        ticker,
        vocabulary: Optional[Vocabulary] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._settings = settings
        self._ticker = ticker
        self._vocabulary = vocabulary
        self._rng = rng or random.Random()
        self._listeners: List[Listener] = []
        self._session = Session(
            language=settings.default_language,
            remaining_seconds=settings.countdown_seconds,
        )
        self._reducer = InputReducer(
            self._session,
            on_input=lambda: self._emit(SessionEvent.INPUT),
            on_passage_end=self._rotate_passage,
        )
        self._composition = CompositionBuffer(self._reducer)

    @property
    def session(self) -> Session:
        return self._session

    @property
    def reducer(self) -> InputReducer:
        return self._reducer

    @property
    def composition(self) -> CompositionBuffer:
        return self._composition

    @property
    def settings(self) -> Settings:
        return self._settings

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def set_vocabulary(self, vocabulary: Vocabulary) -> None:
        self._vocabulary = vocabulary

    def is_ready(self, language: Optional[Language] = None) -> bool:
        language = language or self._session.language
        return self._vocabulary is not None and bool(self._vocabulary.pool(language))

    def start(self, language: Optional[Language] = None) -> None:
        """Begin a new countdown with a fresh passage."""
        session = self._session
        if session.is_running:
            logger.debug("start() ignored: session already running")
            return
        if language is not None:
            session.language = language
        if not self.is_ready(session.language):
            raise NotReadyError(f"Vocabulary for {session.language.value} is not loaded")

        session.totals.total_typed = 0
        session.totals.errors = 0
        session.remaining_seconds = self._settings.countdown_seconds
        self._composition.cancel()
        session.load_passage(self._new_passage())
        session.status = SessionStatus.RUNNING
        self._ticker.start(self._settings.tick_interval_ms, self.tick)
        logger.info("Session started (%s, %ds)", session.language.value, session.remaining_seconds)
        self._emit(SessionEvent.STARTED)

    def tick(self) -> None:
        session = self._session
        if not session.is_running:
            return
        session.remaining_seconds = max(0, session.remaining_seconds - 1)
        if session.remaining_seconds <= 0:
            self._finish()
            return
        self._emit(SessionEvent.TICK)

    def reset(self) -> None:
        """Stop the countdown and return to idle; safe from any state."""
        self._ticker.stop()
        self._composition.cancel()
        session = self._session
        session.status = SessionStatus.IDLE
        session.clear_passage()
        session.totals.total_typed = 0
        session.totals.errors = 0
        session.remaining_seconds = self._settings.countdown_seconds
        logger.info("Session reset")
        self._emit(SessionEvent.RESET)

    def switch_language(self, language: Language) -> None:
        if self._session.is_running:
            self.reset()
        self._session.language = language
        logger.info("Language switched to %s", language.value)
        self._emit(SessionEvent.LANGUAGE)

    def stats(self) -> SessionStats:
        session = self._session
        elapsed = self._settings.countdown_seconds - session.remaining_seconds
        totals = session.totals
        return SessionStats(
            wpm=compute_wpm(totals.total_typed, session.language, elapsed, self._settings.chars_per_word),
            accuracy=compute_accuracy(totals.total_typed, totals.errors),
            errors=totals.errors,
            total_typed=totals.total_typed,
            elapsed_seconds=elapsed,
            remaining_seconds=session.remaining_seconds,
        )

    def _finish(self) -> None:
        self._ticker.stop()
        self._composition.cancel()
        session = self._session
        session.status = SessionStatus.FINISHED
        session.clear_passage()
        stats = self.stats()
        logger.info("Session finished: %d wpm, %d%% accuracy, %d errors", stats.wpm, stats.accuracy, stats.errors)
        self._emit(SessionEvent.FINISHED)

    def _rotate_passage(self) -> None:
        self._session.load_passage(self._new_passage())
        logger.debug("Passage exhausted, rotated in a new one")
        self._emit(SessionEvent.ROTATED)

    def _new_passage(self):
        return generate_passage(self._vocabulary, self._session.language, self._settings, self._rng)

    def _emit(self, event: SessionEvent) -> None:
        for listener in list(self._listeners):
            listener(event)

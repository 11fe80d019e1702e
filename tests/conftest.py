"""Shared fixtures: a hand-driven ticker and small in-memory vocabularies."""

from __future__ import annotations

import random
from typing import Callable, Optional

import pytest

from vegam.core.models import Passage
from vegam.core.session import SessionController
from vegam.core.settings import Settings
from vegam.core.vocabulary import Vocabulary


class ManualTicker:
    """Ticker double: records start/stop and fires the callback on demand."""

    def __init__(self) -> None:
        self.callback: Optional[Callable[[], None]] = None
        self.interval_ms: Optional[int] = None
        self.starts = 0
        self.stops = 0

    @property
    def active(self) -> bool:
        return self.callback is not None

    def start(self, interval_ms: int, callback: Callable[[], None]) -> None:
        self.interval_ms = interval_ms
        self.callback = callback
        self.starts += 1

    def stop(self) -> None:
        self.callback = None
        self.stops += 1

    def fire(self, times: int = 1) -> None:
        for _ in range(times):
            if self.callback is None:
                return
            self.callback()


@pytest.fixture()
def ticker() -> ManualTicker:
    return ManualTicker()


@pytest.fixture()
def settings() -> Settings:
    return Settings()


@pytest.fixture()
def vocabulary() -> Vocabulary:
    return Vocabulary.from_lists(["cat", "dog", "bird"], ["中", "文", "字"])


@pytest.fixture()
def controller(settings: Settings, ticker: ManualTicker, vocabulary: Vocabulary) -> SessionController:
    return SessionController(settings, ticker, vocabulary=vocabulary, rng=random.Random(7))


def use_passage(controller: SessionController, text: str) -> None:
    """Replace the running session's passage with *text*, one unit per character."""
    session = controller.session
    session.load_passage(Passage(units=tuple(text), language=session.language))


@pytest.fixture()
def load_text() -> Callable[[SessionController, str], None]:
    return use_passage

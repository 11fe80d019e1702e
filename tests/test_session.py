"""Tests for vegam.core.session – controller lifecycle, countdown and stats."""

from __future__ import annotations

import random

import pytest

from vegam.core.ledger import CharState
from vegam.core.models import Language, SessionEvent, SessionStatus
from vegam.core.session import (
    NotReadyError,
    SessionController,
    compute_accuracy,
    compute_wpm,
    round_half_up,
)
from vegam.core.settings import Settings
from vegam.core.vocabulary import Vocabulary


# ---------------------------------------------------------------------------
# Stat formulas
# ---------------------------------------------------------------------------

class TestComputeAccuracy:
    def test_partial(self):
        assert compute_accuracy(10, 3) == 70

    def test_nothing_typed(self):
        assert compute_accuracy(0, 0) == 0

    def test_perfect(self):
        assert compute_accuracy(42, 0) == 100

    def test_rounds_half_up(self):
        # 7/8 = 87.5%
        assert compute_accuracy(8, 1) == 88


class TestComputeWpm:
    def test_alphabetic_one_minute(self):
        assert compute_wpm(250, Language.ALPHABETIC, 60) == 50

    def test_alphabetic_half_minute(self):
        assert compute_wpm(100, Language.ALPHABETIC, 30) == 40

    def test_ideographic_counts_characters(self):
        assert compute_wpm(30, Language.IDEOGRAPHIC, 60) == 30

    def test_zero_elapsed(self):
        assert compute_wpm(250, Language.ALPHABETIC, 0) == 0

    def test_word_count_rounded_before_rate(self):
        # 12 chars -> 2.4 words -> 2 words; 2 / (20/60) = 6
        assert compute_wpm(12, Language.ALPHABETIC, 20) == 6


class TestRoundHalfUp:
    @pytest.mark.parametrize("value, expected", [(0.5, 1), (1.5, 2), (2.5, 3), (2.49, 2), (0.0, 0)])
    def test_values(self, value, expected):
        assert round_half_up(value) == expected


# ---------------------------------------------------------------------------
# start()
# ---------------------------------------------------------------------------

class TestStart:
    def test_not_ready_without_vocabulary(self, settings, ticker):
        controller = SessionController(settings, ticker)
        assert not controller.is_ready()
        with pytest.raises(NotReadyError):
            controller.start()
        assert controller.session.status is SessionStatus.IDLE
        assert ticker.starts == 0

    def test_start_runs_session(self, controller, ticker):
        controller.start()
        session = controller.session
        assert session.status is SessionStatus.RUNNING
        assert session.remaining_seconds == 60
        assert session.cursor == 0
        assert ticker.active
        assert ticker.interval_ms == 1000

    def test_alphabetic_passage_generated(self, controller):
        controller.start(Language.ALPHABETIC)
        passage = controller.session.passage
        assert passage is not None
        assert passage.language is Language.ALPHABETIC
        assert len(controller.session.ledger) == len(passage)

    def test_ideographic_passage_generated(self, controller):
        controller.start(Language.IDEOGRAPHIC)
        assert len(controller.session.passage) == 100
        assert len(controller.session.ledger) == 100

    def test_start_resets_totals(self, controller):
        controller.start()
        controller.reducer.submit_character("#")
        controller.reset()
        controller.start()
        assert controller.session.totals.total_typed == 0
        assert controller.session.totals.errors == 0

    def test_start_while_running_ignored(self, controller, ticker):
        controller.start()
        passage = controller.session.passage
        controller.start()
        assert controller.session.passage is passage
        assert ticker.starts == 1

    def test_start_after_finish(self, controller, ticker):
        controller.start()
        ticker.fire(60)
        controller.start()
        assert controller.session.status is SessionStatus.RUNNING
        assert controller.session.remaining_seconds == 60


# ---------------------------------------------------------------------------
# Countdown
# ---------------------------------------------------------------------------

class TestCountdown:
    def test_tick_decrements(self, controller, ticker):
        controller.start()
        ticker.fire(3)
        assert controller.session.remaining_seconds == 57
        assert controller.stats().elapsed_seconds == 3

    def test_finishes_after_window(self, controller, ticker):
        controller.start()
        ticker.fire(59)
        assert controller.session.status is SessionStatus.RUNNING
        ticker.fire()
        assert controller.session.status is SessionStatus.FINISHED
        assert controller.session.remaining_seconds == 0
        assert not ticker.active

    def test_no_input_after_finish(self, controller, ticker):
        controller.start()
        controller.reducer.submit_character("x")
        ticker.fire(60)
        session = controller.session
        ledger = session.ledger.states()
        assert not controller.reducer.submit_character("a")
        assert not controller.reducer.request_correction()
        assert session.ledger.states() == ledger
        assert session.totals.total_typed == 1

    def test_final_stats_kept(self, controller, ticker, load_text):
        controller.start(Language.ALPHABETIC)
        load_text(controller, "ab ")
        controller.reducer.submit_character("a")
        ticker.fire(60)
        stats = controller.stats()
        assert stats.total_typed == 1
        assert stats.accuracy == 100
        assert stats.elapsed_seconds == 60

    def test_tick_while_idle_ignored(self, controller):
        controller.tick()
        assert controller.session.remaining_seconds == 60

    def test_custom_window(self, ticker, vocabulary):
        controller = SessionController(Settings(countdown_seconds=5), ticker, vocabulary=vocabulary)
        controller.start()
        ticker.fire(5)
        assert controller.session.status is SessionStatus.FINISHED


# ---------------------------------------------------------------------------
# reset() and switch_language()
# ---------------------------------------------------------------------------

class TestReset:
    def test_reset_clears_everything(self, controller, ticker):
        controller.start()
        controller.reducer.submit_character("q")
        ticker.fire(10)
        controller.reset()
        session = controller.session
        assert session.status is SessionStatus.IDLE
        assert session.passage is None
        assert len(session.ledger) == 0
        assert session.cursor == 0
        assert session.totals.total_typed == 0
        assert session.remaining_seconds == 60
        assert not ticker.active

    def test_reset_from_idle(self, controller):
        controller.reset()
        assert controller.session.status is SessionStatus.IDLE

    def test_reset_mid_composition(self, controller, ticker):
        controller.start(Language.IDEOGRAPHIC)
        controller.composition.begin()
        controller.composition.update("zh")
        controller.reset()
        assert controller.composition.pending == ""
        assert not ticker.active
        assert not controller.composition.commit("中")


class TestSwitchLanguage:
    def test_switch_while_running_resets(self, controller, ticker):
        controller.start(Language.ALPHABETIC)
        controller.reducer.submit_character("x")
        controller.switch_language(Language.IDEOGRAPHIC)
        session = controller.session
        assert session.status is SessionStatus.IDLE
        assert session.cursor == 0
        assert len(session.ledger) == 0
        assert session.language is Language.IDEOGRAPHIC
        assert not ticker.active

    def test_switch_while_idle_does_not_start(self, controller):
        controller.switch_language(Language.IDEOGRAPHIC)
        assert controller.session.status is SessionStatus.IDLE
        assert controller.session.language is Language.IDEOGRAPHIC

    def test_events_emitted(self, controller):
        events = []
        controller.add_listener(events.append)
        controller.start(Language.ALPHABETIC)
        controller.switch_language(Language.IDEOGRAPHIC)
        assert events == [SessionEvent.STARTED, SessionEvent.RESET, SessionEvent.LANGUAGE]


# ---------------------------------------------------------------------------
# Passage rotation
# ---------------------------------------------------------------------------

class TestRotation:
    def test_totals_survive_rotation(self, ticker):
        vocabulary = Vocabulary.from_lists(["cat"], ["中"])
        controller = SessionController(Settings(), ticker, vocabulary=vocabulary, rng=random.Random(1))
        controller.start(Language.IDEOGRAPHIC)
        reducer = controller.reducer
        for _ in range(99):
            reducer.submit_composed_unit("中")
        reducer.submit_composed_unit("文")
        session = controller.session
        assert session.totals.total_typed == 100
        assert session.totals.errors == 1
        assert session.cursor == 0
        assert len(session.ledger) == 100
        assert session.ledger.states() == [CharState.UNTYPED] * 100

    def test_errors_accumulate_across_passages(self, ticker):
        vocabulary = Vocabulary.from_lists(["cat"], ["中"])
        settings = Settings(ideographic_char_count=20)
        controller = SessionController(settings, ticker, vocabulary=vocabulary)
        controller.start(Language.IDEOGRAPHIC)
        reducer = controller.reducer
        for _ in range(5):
            for _ in range(19):
                reducer.submit_composed_unit("中")
            reducer.submit_composed_unit("x")
        session = controller.session
        assert session.totals.errors == 5
        assert session.totals.total_typed == 100
        assert reducer.submit_composed_unit("中")
        assert session.totals.total_typed == 101
        assert session.totals.errors == 5

    def test_rotation_event(self, controller, load_text):
        events = []
        controller.start(Language.ALPHABETIC)
        load_text(controller, "a")
        controller.add_listener(events.append)
        controller.reducer.submit_character("a")
        assert events == [SessionEvent.ROTATED, SessionEvent.INPUT]

    def test_session_clock_continues(self, controller, ticker, load_text):
        controller.start(Language.ALPHABETIC)
        ticker.fire(10)
        load_text(controller, "a")
        controller.reducer.submit_character("a")
        assert controller.session.remaining_seconds == 50
        assert controller.session.status is SessionStatus.RUNNING


# ---------------------------------------------------------------------------
# stats()
# ---------------------------------------------------------------------------

class TestStats:
    def test_idle_stats(self, controller):
        stats = controller.stats()
        assert stats.wpm == 0
        assert stats.accuracy == 0
        assert stats.errors == 0
        assert stats.remaining_seconds == 60

    def test_stats_after_typing(self, controller, ticker, load_text):
        controller.start(Language.ALPHABETIC)
        load_text(controller, "hello world ")
        for key in "hello":
            controller.reducer.submit_character(key)
        ticker.fire(30)
        stats = controller.stats()
        assert stats.total_typed == 5
        assert stats.accuracy == 100
        # 1 word in half a minute
        assert stats.wpm == 2

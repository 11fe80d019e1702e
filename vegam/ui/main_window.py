from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import QEvent, QObject, QPoint, Qt, QTimer
from PySide6.QtGui import QKeyEvent, QMouseEvent
from PySide6.QtWidgets import (
    QFrame,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from vegam.core.models import Language, SessionEvent, SessionStatus
from vegam.core.session import NotReadyError, SessionController
from vegam.core.vocabulary import Vocabulary
from vegam.ui.colors import PaletteColors
from vegam.ui.loader import VocabularyLoadWorker, start_vocabulary_load
from vegam.ui.typing_widgets import ImeInput, PassageView

logger = logging.getLogger(__name__)

IDLE_MESSAGE = "Click Start to begin the test"
FINISHED_MESSAGE = "Click Start to try again."
LOADING_MESSAGE = "Loading word lists..."
NOT_READY_MESSAGE = "Please wait for word list to load..."
LOAD_ERROR_MESSAGE = "Error loading word lists. Please restart the application."


class MainWindow(QMainWindow):
    """Typing test window: stats header, passage display, language toggle and controls.

    Everything shown is re-rendered from the controller's session after each
    session event; widgets are never read back as state.
    """

    def __init__(self, controller: SessionController, load_vocabulary: bool = True) -> None:
        super().__init__()
        self._controller = controller
        self._vocabulary_failed = False

        self._passage_view: Optional[PassageView] = None
        self._ime_input: Optional[ImeInput] = None
        self._timer_label: Optional[QLabel] = None
        self._wpm_label: Optional[QLabel] = None
        self._accuracy_label: Optional[QLabel] = None
        self._errors_label: Optional[QLabel] = None
        self._start_button: Optional[QPushButton] = None
        self._reset_button: Optional[QPushButton] = None
        self._english_button: Optional[QPushButton] = None
        self._chinese_button: Optional[QPushButton] = None
        self._load_worker: Optional[VocabularyLoadWorker] = None

        self._build_ui()
        self._controller.add_listener(self._on_session_event)
        self._apply_language()
        self._render()

        if load_vocabulary:
            self._begin_vocabulary_load()

    def _build_ui(self) -> None:
        self.setWindowTitle("Vegam typing test")
        self.setMinimumSize(900, 560)

        central = QWidget(self)
        central.setStyleSheet(
            f"""
            QWidget#central {{
                background: qlineargradient(x1:0, y1:0, x2:0, y2:1,
                    stop:0 {PaletteColors.BG_TOP}, stop:1 {PaletteColors.BG_BOTTOM});
            }}
            """
        )
        central.setObjectName("central")
        self.setCentralWidget(central)
        root = QVBoxLayout(central)
        root.setContentsMargins(32, 24, 32, 24)
        root.setSpacing(18)

        toggle_row = QHBoxLayout()
        toggle_row.addStretch(1)
        self._english_button = self._toggle_button("English")
        self._english_button.clicked.connect(lambda: self._controller.switch_language(Language.ALPHABETIC))
        self._chinese_button = self._toggle_button("中文")
        self._chinese_button.clicked.connect(lambda: self._controller.switch_language(Language.IDEOGRAPHIC))
        toggle_row.addWidget(self._english_button)
        toggle_row.addWidget(self._chinese_button)
        toggle_row.addStretch(1)
        root.addLayout(toggle_row)

        stats_row = QHBoxLayout()
        stats_row.setSpacing(16)
        self._timer_label = self._stat_card(stats_row, "Time")
        self._wpm_label = self._stat_card(stats_row, "WPM")
        self._accuracy_label = self._stat_card(stats_row, "Accuracy")
        self._errors_label = self._stat_card(stats_row, "Errors")
        root.addLayout(stats_row)

        self._passage_view = PassageView(central)
        self._passage_view.installEventFilter(self)
        self._passage_view.setStyleSheet(
            f"background: {PaletteColors.CARD_BG}; border-radius: 12px;"
        )
        root.addWidget(self._passage_view, 1)

        self._ime_input = ImeInput(self._controller.composition, self._passage_view)
        self._ime_input.committed.connect(lambda _text: self._update_ime_position())
        self._ime_input.correctionRequested.connect(self._controller.reducer.request_correction)
        self._ime_input.hide()

        button_row = QHBoxLayout()
        button_row.addStretch(1)
        self._start_button = self._action_button("Start")
        self._start_button.clicked.connect(self._start_test)
        self._reset_button = self._action_button("Reset")
        self._reset_button.clicked.connect(self._controller.reset)
        button_row.addWidget(self._start_button)
        button_row.addWidget(self._reset_button)
        button_row.addStretch(1)
        root.addLayout(button_row)

    def _toggle_button(self, text: str) -> QPushButton:
        button = QPushButton(text)
        button.setCheckable(True)
        button.setFocusPolicy(Qt.NoFocus)
        button.setCursor(Qt.PointingHandCursor)
        button.setStyleSheet(
            f"""
            QPushButton {{
                background: white;
                color: {PaletteColors.PRIMARY};
                border: 1px solid {PaletteColors.PRIMARY_LIGHT};
                border-radius: 14px;
                padding: 6px 18px;
                font-size: 14px;
            }}
            QPushButton:checked {{
                background: {PaletteColors.PRIMARY};
                color: white;
            }}
            """
        )
        return button

    def _action_button(self, text: str) -> QPushButton:
        button = QPushButton(text)
        button.setFocusPolicy(Qt.NoFocus)
        button.setCursor(Qt.PointingHandCursor)
        button.setMinimumWidth(120)
        button.setStyleSheet(
            f"""
            QPushButton {{
                background: {PaletteColors.PRIMARY};
                color: white;
                border: none;
                border-radius: 8px;
                padding: 10px 24px;
                font-size: 15px;
                font-weight: 600;
            }}
            QPushButton:disabled {{
                background: {PaletteColors.TEXT_MUTED};
            }}
            """
        )
        return button

    def _stat_card(self, row: QHBoxLayout, title: str) -> QLabel:
        card = QFrame()
        card.setStyleSheet(f"QFrame {{ background: {PaletteColors.CARD_BG}; border-radius: 10px; }}")
        layout = QVBoxLayout(card)
        layout.setContentsMargins(16, 10, 16, 10)
        header = QLabel(title)
        header.setAlignment(Qt.AlignCenter)
        header.setStyleSheet(f"color: {PaletteColors.TEXT_MUTED}; font-size: 12px; background: transparent;")
        value = QLabel("0")
        value.setAlignment(Qt.AlignCenter)
        value.setStyleSheet(
            f"color: {PaletteColors.PRIMARY}; font-size: 28px; font-weight: 700; background: transparent;"
        )
        layout.addWidget(header)
        layout.addWidget(value)
        row.addWidget(card, 1)
        return value

    def _begin_vocabulary_load(self) -> None:
        self._load_worker = VocabularyLoadWorker(self._controller.settings.data_dir)
        self._load_worker.signals.loaded.connect(self._on_vocabulary_loaded)
        self._load_worker.signals.failed.connect(self._on_vocabulary_failed)
        start_vocabulary_load(self._load_worker)

    def _on_vocabulary_loaded(self, vocabulary: Vocabulary) -> None:
        self._controller.set_vocabulary(vocabulary)
        self._render()

    def _on_vocabulary_failed(self, reason: str) -> None:
        self._vocabulary_failed = True
        self._render()

    def _start_test(self) -> None:
        try:
            self._controller.start()
        except NotReadyError as e:
            logger.warning("Start requested too early: %s", e)
            if self._passage_view is not None:
                self._passage_view.show_message(NOT_READY_MESSAGE)

    def _on_session_event(self, event: SessionEvent) -> None:
        if event in (SessionEvent.LANGUAGE, SessionEvent.RESET, SessionEvent.STARTED):
            self._apply_language()
        self._render()

    def _apply_language(self) -> None:
        """Sync the toggle and the input surface with the active language."""
        ideographic = self._controller.session.language is Language.IDEOGRAPHIC
        if self._english_button is not None:
            self._english_button.setChecked(not ideographic)
        if self._chinese_button is not None:
            self._chinese_button.setChecked(ideographic)
        if self._passage_view is not None:
            self._passage_view.set_ideographic(ideographic)
        if self._ime_input is None or self._passage_view is None:
            return
        if ideographic:
            self._ime_input.show()
            self._ime_input.setFocus()
            QTimer.singleShot(0, self._update_ime_position)
        else:
            self._ime_input.clearFocus()
            self._ime_input.hide()
            self._passage_view.setFocus()

    def _render(self) -> None:
        session = self._controller.session
        stats = self._controller.stats()
        self._timer_label.setText(str(stats.remaining_seconds))
        self._wpm_label.setText(str(stats.wpm))
        self._accuracy_label.setText(f"{stats.accuracy}%")
        self._errors_label.setText(str(stats.errors))

        running = session.status is SessionStatus.RUNNING
        self._start_button.setEnabled(
            not running and not self._vocabulary_failed and self._controller.is_ready()
        )
        self._reset_button.setEnabled(session.status is not SessionStatus.IDLE)

        if self._vocabulary_failed:
            self._passage_view.show_message(LOAD_ERROR_MESSAGE)
        elif running and session.passage is not None:
            self._passage_view.set_content(session.passage.units, session.ledger.states(), session.cursor)
            self._update_ime_position()
        elif session.status is SessionStatus.FINISHED:
            self._passage_view.show_message(FINISHED_MESSAGE)
        elif not self._controller.is_ready():
            self._passage_view.show_message(LOADING_MESSAGE)
        else:
            self._passage_view.show_message(IDLE_MESSAGE)

    def _update_ime_position(self) -> None:
        """Keep the IME field just below the character being typed."""
        if self._ime_input is None or self._passage_view is None or not self._ime_input.isVisible():
            return
        rect = self._passage_view.current_unit_rect()
        if rect is None:
            self._ime_input.move(PassageView.PADDING, PassageView.PADDING)
            return
        x = min(rect.left(), max(0, self._passage_view.width() - self._ime_input.width()))
        self._ime_input.move(QPoint(x, rect.bottom() + 5))
        self._ime_input.raise_()

    def eventFilter(self, obj: QObject, event: QEvent) -> bool:
        if obj is self._passage_view and event.type() == QEvent.Type.KeyPress:
            return self._on_key_press(event)
        return super().eventFilter(obj, event)

    def _on_key_press(self, event: QKeyEvent) -> bool:
        """Alphabetic typing: one key press is one submitted character."""
        session = self._controller.session
        if not session.is_running or session.language is not Language.ALPHABETIC:
            return False
        if event.key() == Qt.Key.Key_Backspace:
            self._controller.reducer.request_correction()
            return True
        text = event.text()
        if len(text) == 1 and text.isprintable():
            self._controller.reducer.submit_character(text)
            return True
        return False

    def mousePressEvent(self, event: QMouseEvent) -> None:
        super().mousePressEvent(event)
        session = self._controller.session
        if session.is_running and session.language is Language.IDEOGRAPHIC and self._ime_input is not None:
            self._ime_input.setFocus()
        elif self._passage_view is not None:
            self._passage_view.setFocus()

    def closeEvent(self, event) -> None:
        self._controller.reset()
        super().closeEvent(event)

"""Typing test UI: passage display and the IME input field."""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from PySide6.QtCore import QRect, Qt, Signal
from PySide6.QtGui import QColor, QFont, QFontMetrics, QInputMethodEvent, QKeyEvent, QPainter
from PySide6.QtWidgets import QLineEdit, QWidget

from vegam.core.ledger import CharState
from vegam.core.reducer import CompositionBuffer, CompositionState
from vegam.ui.colors import PaletteColors, unit_colors


def split_tokens(units: Sequence[str]) -> List[Tuple[int, int]]:
    """Split passage units into unbreakable ``(start, end)`` spans.

    Text with spaces wraps after each space; text without spaces
    (ideographic) may wrap after any unit.
    """
    if " " not in units:
        return [(i, i + 1) for i in range(len(units))]
    tokens: List[Tuple[int, int]] = []
    start = 0
    for i, unit in enumerate(units):
        if unit == " ":
            tokens.append((start, i + 1))
            start = i + 1
    if start < len(units):
        tokens.append((start, len(units)))
    return tokens


class PassageView(QWidget):
    """Paints the passage from the ledger and cursor; never holds state of its own."""

    PADDING = 24

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._units: list[str] = []
        self._states: list[CharState] = []
        self._cursor: int = 0
        self._message: str = ""
        self._rects: list[QRect] = []
        self._font = QFont()
        self._font.setPointSize(22)
        self.setFocusPolicy(Qt.StrongFocus)
        self.setMinimumHeight(260)

    def set_ideographic(self, ideographic: bool) -> None:
        self._font.setPointSize(28 if ideographic else 22)
        self._relayout()

    def show_message(self, text: str) -> None:
        self._message = text
        self._units = []
        self._states = []
        self._cursor = 0
        self._relayout()

    def set_content(self, units: Sequence[str], states: Sequence[CharState], cursor: int) -> None:
        self._message = ""
        self._units = list(units)
        self._states = list(states)
        self._cursor = cursor
        self._relayout()

    def current_unit_rect(self) -> Optional[QRect]:
        if 0 <= self._cursor < len(self._rects):
            return QRect(self._rects[self._cursor])
        return None

    def resizeEvent(self, event) -> None:
        super().resizeEvent(event)
        self._relayout()

    def _relayout(self) -> None:
        self._rects = []
        if not self._units:
            self.update()
            return
        fm = QFontMetrics(self._font)
        line_height = int(fm.height() * 1.6)
        right = max(self.width() - self.PADDING, self.PADDING + 1)
        x = y = self.PADDING
        widths = [fm.horizontalAdvance(u) for u in self._units]
        for start, end in split_tokens(self._units):
            token_width = sum(widths[start:end])
            if x + token_width > right and x > self.PADDING:
                x = self.PADDING
                y += line_height
            for i in range(start, end):
                self._rects.append(QRect(x, y, widths[i], line_height))
                x += widths[i]
        self.update()

    def paintEvent(self, event) -> None:
        super().paintEvent(event)
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing, True)
        painter.setFont(self._font)

        if self._message or not self._units:
            painter.setPen(QColor(PaletteColors.TEXT_SECONDARY))
            painter.drawText(self.rect(), Qt.AlignCenter | Qt.TextWordWrap, self._message)
            return

        for i, rect in enumerate(self._rects):
            fg, bg = unit_colors(self._states[i], i == self._cursor)
            if bg is not None:
                painter.setPen(Qt.NoPen)
                painter.setBrush(QColor(bg))
                painter.drawRoundedRect(rect.adjusted(0, 4, 0, -4), 4, 4)
            painter.setPen(QColor(fg))
            painter.drawText(rect, Qt.AlignCenter, self._units[i])
            if self._units[i] == " " and self._states[i] is CharState.INCORRECT:
                painter.drawLine(rect.left() + 2, rect.bottom() - 6, rect.right() - 2, rect.bottom() - 6)


class ImeInput(QLineEdit):
    """Composition-capable field for ideographic typing.

    Pre-edit text only feeds the composition buffer; each commit is handed
    over once. Backspace outside a composition asks for a correction instead
    of editing the field.
    """

    committed = Signal(str)
    correctionRequested = Signal()

    def __init__(self, composition: CompositionBuffer, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._composition = composition
        self.setAttribute(Qt.WA_InputMethodEnabled, True)
        self.setFixedWidth(180)
        self.setStyleSheet(
            f"""
            QLineEdit {{
                background: white;
                color: {PaletteColors.TEXT_PRIMARY};
                border: 2px solid {PaletteColors.PRIMARY_LIGHT};
                border-radius: 6px;
                padding: 4px 8px;
                font-size: 18px;
            }}
            """
        )

    def inputMethodEvent(self, event: QInputMethodEvent) -> None:
        preedit = event.preeditString()
        commit = event.commitString()
        # One event may commit a unit and open the next composition.
        if commit:
            self._composition.commit(commit)
            self.committed.emit(commit)
        if preedit:
            if self._composition.state is CompositionState.IDLE:
                self._composition.begin()
            self._composition.update(preedit)
        elif self._composition.state is CompositionState.COMPOSING:
            self._composition.cancel()
        # The field only ever shows pre-edit text; commits never land in it.
        super().inputMethodEvent(QInputMethodEvent(preedit, event.attributes()))
        event.accept()

    def keyPressEvent(self, event: QKeyEvent) -> None:
        composing = self._composition.state is CompositionState.COMPOSING
        if event.key() == Qt.Key.Key_Backspace and not composing:
            self.correctionRequested.emit()
            event.accept()
            return
        text = event.text()
        if text and text.isprintable() and not composing:
            self._composition.commit(text)
            self.clear()
            self.committed.emit(text)
            event.accept()
            return
        super().keyPressEvent(event)

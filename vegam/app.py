"""Application entry point and setup for the Vegam typing test."""

import logging
import os
import sys

from PySide6.QtGui import QFont
from PySide6.QtWidgets import QApplication

from vegam.core.session import SessionController
from vegam.core.settings import load_settings
from vegam.ui.main_window import MainWindow
from vegam.ui.ticker import QtTicker


def configure_logging() -> None:
    """Configure application-wide logging; ``VEGAM_LOG_LEVEL`` sets the level."""
    level_name = os.environ.get("VEGAM_LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def configure_font(app: QApplication) -> None:
    """Prefer fonts that cover both Latin and CJK text."""
    app_font = QFont()
    app_font.setFamilies(
        [
            "Noto Sans",
            "Noto Sans CJK TC",  # Linux
            "Microsoft JhengHei",  # Windows
            "PingFang TC",  # macOS
        ]
    )
    app_font.setPointSize(11)
    app.setFont(app_font)


def run() -> None:
    """Load settings, build the controller and window, and start the event loop."""
    configure_logging()
    app = QApplication(sys.argv)
    app.setApplicationName("Vegam")
    app.setApplicationDisplayName("Vegam")
    configure_font(app)

    settings = load_settings()
    ticker = QtTicker()
    controller = SessionController(settings, ticker)

    window = MainWindow(controller)
    window.show()

    sys.exit(app.exec())

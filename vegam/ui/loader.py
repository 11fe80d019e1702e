from __future__ import annotations

import logging
from pathlib import Path

from PySide6.QtCore import QObject, QRunnable, QThreadPool, Signal

from vegam.core.vocabulary import SourceUnavailableError, load_vocabulary

logger = logging.getLogger(__name__)


class VocabularyLoadSignals(QObject):
    loaded = Signal(object)
    failed = Signal(str)


class VocabularyLoadWorker(QRunnable):
    """Reads both lexicons off the UI thread and reports back through signals."""

    def __init__(self, data_dir: Path) -> None:
        super().__init__()
        self.data_dir = data_dir
        self.signals = VocabularyLoadSignals()

    def run(self) -> None:
        try:
            vocabulary = load_vocabulary(self.data_dir)
        except SourceUnavailableError as e:
            logger.warning("Error loading word lists: %s", e)
            self.signals.failed.emit(str(e))
            return
        self.signals.loaded.emit(vocabulary)


def start_vocabulary_load(worker: VocabularyLoadWorker) -> None:
    QThreadPool.globalInstance().start(worker)

from __future__ import annotations

import json
import logging
import random
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional

from vegam.core.models import Language, Passage
from vegam.core.settings import Settings

logger = logging.getLogger(__name__)

ALPHABETIC_FILE = "en_common.json"
IDEOGRAPHIC_FILE = "cn_common.json"


class SourceUnavailableError(RuntimeError):
    """A vocabulary source is missing, unreadable, malformed or empty."""


@dataclass(frozen=True)
class Vocabulary:
    words: tuple[str, ...]
    characters: tuple[str, ...]

    @classmethod
    def from_lists(cls, words: Iterable[str], characters: Iterable[str]) -> "Vocabulary":
        """Build a vocabulary from in-memory pools; both must be non-empty."""
        vocabulary = cls(
            words=tuple(w.strip() for w in words if w and w.strip()),
            characters=tuple(c.strip() for c in characters if c and c.strip()),
        )
        if not vocabulary.words:
            raise SourceUnavailableError("alphabetic lexicon is empty")
        if not vocabulary.characters:
            raise SourceUnavailableError("ideographic lexicon is empty")
        return vocabulary

    def pool(self, language: Language) -> tuple[str, ...]:
        return self.words if language is Language.ALPHABETIC else self.characters


def load_vocabulary(data_dir: Path) -> Vocabulary:
    """Load both lexicons from *data_dir*.

    ``en_common.json`` is an object whose ``data`` field lists words;
    ``cn_common.json`` is a list of entries, each reduced to its
    ``traditional`` form when present, else its ``char`` field.
    """
    words = _read_json(data_dir / ALPHABETIC_FILE)
    if not isinstance(words, dict) or not isinstance(words.get("data"), list):
        raise SourceUnavailableError(f"{ALPHABETIC_FILE}: expected an object with a 'data' list")
    entries = _read_json(data_dir / IDEOGRAPHIC_FILE)
    if not isinstance(entries, list):
        raise SourceUnavailableError(f"{IDEOGRAPHIC_FILE}: expected a list of entries")

    vocabulary = Vocabulary.from_lists(
        (str(word) for word in words["data"] if isinstance(word, str)),
        _reduce_entries(entries),
    )
    logger.info(
        "Loaded vocabulary: %d words, %d characters", len(vocabulary.words), len(vocabulary.characters)
    )
    return vocabulary


def _read_json(path: Path) -> object:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise SourceUnavailableError(f"Vocabulary file not found: {path}") from None
    except (json.JSONDecodeError, OSError, UnicodeDecodeError) as e:
        raise SourceUnavailableError(f"Could not read {path.name}: {e}") from e


def _reduce_entries(entries: list) -> List[str]:
    characters: List[str] = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        value = entry.get("traditional") or entry.get("char")
        if isinstance(value, str) and value.strip():
            characters.append(value.strip())
    return characters


def generate_passage(
    vocabulary: Vocabulary,
    language: Language,
    settings: Settings,
    rng: Optional[random.Random] = None,
) -> Passage:
    """Draw a fresh passage for *language*, uniformly with replacement."""
    rng = rng or random.Random()
    pool = vocabulary.pool(language)
    if not pool:
        raise SourceUnavailableError(f"No vocabulary available for {language.value}")

    if language is Language.IDEOGRAPHIC:
        drawn = rng.choices(pool, k=settings.ideographic_char_count)
        return Passage(units=tuple("".join(drawn)), language=language)

    drawn = rng.choices(pool, k=settings.alphabetic_word_count)
    units: list[str] = []
    for i, word in enumerate(drawn):
        if i % settings.words_per_sentence == 0:
            word = word[:1].upper() + word[1:]
        units.extend(word)
        units.append(" ")
    return Passage(units=tuple(units), language=language)

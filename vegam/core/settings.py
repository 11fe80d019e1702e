from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Optional

import yaml

from vegam.core.models import Language

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parent.parent / "data"
SETTINGS_FILE = DATA_DIR / "settings.yaml"


@dataclass(frozen=True)
class Settings:
    countdown_seconds: int = 60
    tick_interval_ms: int = 1000
    alphabetic_word_count: int = 70
    words_per_sentence: int = 10
    ideographic_char_count: int = 100
    chars_per_word: int = 5
    default_language: Language = Language.ALPHABETIC
    data_dir: Path = DATA_DIR


_INT_FIELDS = (
    "countdown_seconds",
    "tick_interval_ms",
    "alphabetic_word_count",
    "words_per_sentence",
    "ideographic_char_count",
    "chars_per_word",
)


def load_settings(path: Optional[Path] = None) -> Settings:
    """Read settings from YAML, then apply ``VEGAM_*`` environment overrides.

    A missing file yields the defaults. Unknown keys are ignored with a
    warning; invalid values, including malformed YAML, raise ``ValueError``
    naming the file or environment variable they came from.
    """
    settings_path = path or SETTINGS_FILE
    values: dict[str, object] = {}
    if settings_path.exists():
        try:
            raw = yaml.safe_load(settings_path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise ValueError(f"{settings_path.name}: invalid YAML: {e}") from e
        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            raise ValueError(f"{settings_path.name}: expected a mapping of settings")
        known = {f.name for f in fields(Settings)}
        for key, value in raw.items():
            if key not in known:
                logger.warning("%s: ignoring unknown setting %r", settings_path.name, key)
                continue
            values[key] = value
    else:
        logger.info("Settings file not found, using defaults: %s", settings_path)
    values = _coerce(values, settings_path.name)

    env_data_dir = os.environ.get("VEGAM_DATA_DIR")
    if env_data_dir:
        values.update(_coerce({"data_dir": env_data_dir}, "VEGAM_DATA_DIR"))
    env_countdown = os.environ.get("VEGAM_COUNTDOWN")
    if env_countdown:
        values.update(_coerce({"countdown_seconds": env_countdown}, "VEGAM_COUNTDOWN"))

    return _validate(replace(Settings(), **values), settings_path.name)


def _to_int(value: object) -> int:
    # bool is an int subclass and floats truncate silently; reject both.
    if isinstance(value, bool):
        raise ValueError(value)
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        return int(value.strip())
    raise ValueError(value)


def _coerce(values: dict[str, object], source: str) -> dict[str, object]:
    coerced: dict[str, object] = {}
    for key, value in values.items():
        if key in _INT_FIELDS:
            try:
                coerced[key] = _to_int(value)
            except ValueError:
                raise ValueError(f"{source}: {key!r} must be an integer, got {value!r}") from None
            if coerced[key] <= 0:
                raise ValueError(f"{source}: {key!r} must be positive")
        elif key == "default_language":
            try:
                coerced[key] = Language(str(value))
            except ValueError:
                raise ValueError(f"{source}: unknown default_language {value!r}") from None
        elif key == "data_dir":
            coerced[key] = Path(str(value)).expanduser()
    return coerced


def _validate(settings: Settings, source: str) -> Settings:
    if settings.words_per_sentence > settings.alphabetic_word_count:
        raise ValueError(f"{source}: 'words_per_sentence' exceeds 'alphabetic_word_count'")
    return settings

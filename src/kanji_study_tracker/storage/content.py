"""Built-in study content loaded from YAML tables."""

from pathlib import Path

import yaml

from kanji_study_tracker.models.study_item import Kanji, Phrase


def _load_table(path: Path, section: str) -> list[dict]:
    if not path.exists():
        raise FileNotFoundError(f"Content file not found: {path}")
    with open(path, encoding='utf-8') as f:
        data = yaml.safe_load(f) or {}
    return data.get(section, [])


def load_kanji(path: Path) -> list[Kanji]:
    """Load the Kanji table from YAML file."""
    return [Kanji(**entry) for entry in _load_table(path, "kanji")]


def load_phrases(path: Path) -> list[Phrase]:
    """Load the phrase table from YAML file."""
    return [Phrase(**entry) for entry in _load_table(path, "phrases")]

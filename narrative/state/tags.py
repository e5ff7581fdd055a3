"""
Tag store - named integer values that track story progress.

Dialog conditions read tags (TAG_CHECK) and line events write them
(update_tag).
"""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional

logger = logging.getLogger(__name__)


@dataclass
class PlayerTag:
    tag_id: str
    display_name: str = ""
    value: int = 0


class TagStore:
    """
    In-memory tag storage.

    Unknown tags read as 0.
    """

    def __init__(self):
        self._tags: dict[str, PlayerTag] = {}

    def __contains__(self, tag_id: str) -> bool:
        return tag_id in self._tags

    def __iter__(self) -> Iterator[PlayerTag]:
        return iter(self._tags.values())

    def __len__(self) -> int:
        return len(self._tags)

    def get_tag(self, tag_id: str) -> Optional[PlayerTag]:
        return self._tags.get(tag_id)

    def get_value(self, tag_id: str) -> int:
        tag = self._tags.get(tag_id)
        return tag.value if tag else 0

    def set_value(self, tag_id: str, value: int, display_name: str = "") -> None:
        tag = self._tags.get(tag_id)
        if tag is None:
            self._tags[tag_id] = PlayerTag(tag_id, display_name, value)
            return
        tag.value = value
        if display_name:
            tag.display_name = display_name

    def increment(self, tag_id: str, amount: int = 1) -> int:
        value = self.get_value(tag_id) + amount
        self.set_value(tag_id, value)
        return value

    def decrement(self, tag_id: str, amount: int = 1) -> int:
        return self.increment(tag_id, -amount)

    def check_value(self, tag_id: str, min_value: int) -> bool:
        """True when the tag is at least ``min_value``."""
        return self.get_value(tag_id) >= min_value

    def clear(self) -> None:
        self._tags.clear()

    def load_csv(self, path: Path | str) -> int:
        """
        Load ``tagId,displayName,value`` rows, skipping the header row.

        Rows with a bad value are logged and skipped. Returns rows loaded.
        """
        path = Path(path)
        loaded = 0
        try:
            with open(path, "r", encoding="utf-8-sig", newline="") as f:
                rows = list(csv.reader(f))
        except OSError as e:
            logger.error(f"Failed to read tag file {path}: {e}")
            return 0

        for line_no, row in enumerate(rows[1:], start=2):
            if not row or not row[0].strip():
                continue
            if len(row) < 3:
                logger.warning(f"{path}:{line_no}: expected 3 columns, got {len(row)}")
                continue
            try:
                value = int(row[2].strip())
            except ValueError:
                logger.warning(f"{path}:{line_no}: invalid tag value '{row[2]}'")
                continue
            self.set_value(row[0].strip(), value, row[1].strip())
            loaded += 1

        logger.info(f"Loaded {loaded} tags from {path}")
        return loaded

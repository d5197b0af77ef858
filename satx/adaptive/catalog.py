"""
Item Catalog: Practice Content Loader.

Loads lessons and quizzes from JSON files:
- A JSON list of items, or an object with an "items" list
- The bundled sample catalog (math, reading, vocab)

The engine only reads id, type, subject, topic and difficulty;
the remaining fields are carried for display.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import Any

from loguru import logger

from satx.adaptive.models import TopicKey
from satx.exceptions import CatalogError

LESSON = "lesson"
QUIZ = "quiz"

# One answer letter per choice (A-H)
MAX_CHOICES = 8

# =============================================================================
# Item Data Class
# =============================================================================


def _text(value: Any) -> str | None:
    return None if value is None else str(value)


@dataclass
class Item:
    """
    A single lesson or quiz.

    `difficulty` is an optional authoring override on the 400-1600
    rating scale.
    """

    id: str | None
    type: str
    subject: str | None = None
    topic: str | None = None
    difficulty: float | None = None
    title: str | None = None

    # Display content
    prompt: str | None = None
    passage: str | None = None
    caption: str | None = None
    choices: list[str] = field(default_factory=list)
    answer_index: int | None = None
    explanation: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Item:
        """
        Create an Item from a dictionary (JSON).

        Accepts both `answer_index` and `answerIndex`.
        """
        difficulty = data.get("difficulty")
        if isinstance(difficulty, bool) or not isinstance(difficulty, (int, float)):
            difficulty = None

        answer_index = data.get("answer_index", data.get("answerIndex"))
        choices = data.get("choices")

        return cls(
            id=_text(data.get("id")) or None,
            type=_text(data.get("type")) or QUIZ,
            subject=_text(data.get("subject")),
            topic=_text(data.get("topic")),
            difficulty=difficulty,
            title=data.get("title"),
            prompt=data.get("prompt"),
            passage=data.get("passage"),
            caption=data.get("caption"),
            choices=[str(c) for c in choices] if isinstance(choices, list) else [],
            answer_index=answer_index if isinstance(answer_index, int) else None,
            explanation=data.get("explanation"),
        )

    @property
    def is_quiz(self) -> bool:
        return self.type == QUIZ

    @property
    def is_lesson(self) -> bool:
        return self.type == LESSON

    @property
    def topic_key(self) -> TopicKey | None:
        return TopicKey.for_values(self.subject, self.topic)

    def in_subject(self, subject: str) -> bool:
        return (self.subject or "").lower() == subject.lower()

    def is_correct_choice(self, index: int) -> bool:
        return self.answer_index is not None and index == self.answer_index


# =============================================================================
# Item Catalog
# =============================================================================


class ItemCatalog:
    """
    An ordered, read-only collection of items.

    Ids are unique: entries without an id are skipped and duplicate ids
    keep their first occurrence.
    """

    BUNDLED_RESOURCE = "catalog.json"

    def __init__(self, items: Iterable[Item] = ()):
        self._items: list[Item] = []
        self._by_id: dict[str, Item] = {}
        self._skipped = 0

        for item in items:
            self._add(item)

    def _add(self, item: Item) -> None:
        if not item.id:
            self._skipped += 1
            logger.warning(f"Skipping catalog entry without id: {item.title or item.prompt!r}")
            return
        if item.id in self._by_id:
            self._skipped += 1
            logger.warning(f"Skipping duplicate catalog id {item.id}")
            return
        if len(item.choices) > MAX_CHOICES:
            self._skipped += 1
            logger.warning(
                f"Skipping {item.id}: {len(item.choices)} choices, at most {MAX_CHOICES} supported"
            )
            return
        self._items.append(item)
        self._by_id[item.id] = item

    @classmethod
    def from_records(cls, records: Iterable[dict[str, Any]]) -> ItemCatalog:
        return cls(Item.from_dict(record) for record in records)

    @classmethod
    def from_file(cls, path: Path) -> ItemCatalog:
        """
        Load a catalog from a JSON file.

        Raises:
            CatalogError: If the file cannot be read or is not a catalog
        """
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise CatalogError(f"Failed to load catalog {path}: {e}") from e

        catalog = cls._from_json(data, source=str(path))
        logger.info(f"Catalog loaded: {len(catalog)} items from {path}")
        return catalog

    @classmethod
    def bundled(cls) -> ItemCatalog:
        """Load the sample catalog shipped with the package."""
        text = resources.files("satx.data").joinpath(cls.BUNDLED_RESOURCE).read_text(encoding="utf-8")
        return cls._from_json(json.loads(text), source="bundled")

    @classmethod
    def _from_json(cls, data: Any, source: str) -> ItemCatalog:
        records = data.get("items") if isinstance(data, dict) else data
        if not isinstance(records, list):
            raise CatalogError(f"Catalog {source} must be a list or an object with an 'items' list")
        return cls.from_records(r for r in records if isinstance(r, dict))

    def __iter__(self) -> Iterator[Item]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._by_id

    @property
    def skipped(self) -> int:
        """Entries dropped while loading."""
        return self._skipped

    @property
    def subjects(self) -> list[str]:
        """Subjects in first-seen order."""
        seen: dict[str, None] = {}
        for item in self._items:
            if item.subject:
                seen.setdefault(item.subject.lower(), None)
        return list(seen)

    def get(self, item_id: str) -> Item | None:
        return self._by_id.get(item_id)

    def quizzes(self, subject: str | None = None) -> list[Item]:
        """Quiz items, optionally limited to one subject."""
        return [
            item
            for item in self._items
            if item.is_quiz and (subject is None or item.in_subject(subject))
        ]

    def lessons(self, subject: str) -> list[Item]:
        return [item for item in self._items if item.is_lesson and item.in_subject(subject)]

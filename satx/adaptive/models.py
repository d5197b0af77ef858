"""
Adaptive Engine Data Model.

Everything the engine persists lives in one LearnerModel:
- TopicState per (subject, topic) key: ELO-like rating + counters
- ItemState per item id: exposure counters
- A bounded history log of results

The model is read and written wholesale, so serialization is kept here
next to the dataclasses (to_dict/from_dict), the same way the delivery
layer keeps its event schemas self-describing.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, NamedTuple

DEFAULT_TOPIC = "general"
DEFAULT_RATING = 800
MIN_RATING = 400
MAX_RATING = 1600

# =============================================================================
# Keys
# =============================================================================


class TopicKey(NamedTuple):
    """Composite (subject, topic) key, both lower-cased."""

    subject: str
    topic: str

    @classmethod
    def for_values(cls, subject: str | None, topic: str | None) -> TopicKey | None:
        """Build a key, or None when there is no subject to key against."""
        subj = str(subject or "").strip().lower()
        if not subj:
            return None
        top = str(topic or "").strip().lower() or DEFAULT_TOPIC
        return cls(subj, top)

    def __str__(self) -> str:
        return f"{self.subject}/{self.topic}"


# =============================================================================
# State
# =============================================================================


def _ts(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _parse_ts(value: Any) -> datetime | None:
    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    # naive timestamps are read as UTC
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _record(value: Any, what: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise TypeError(f"Expected {what} to be an object, got {type(value).__name__}")
    return value


def _counters(data: dict[str, Any]) -> tuple[int, int, int]:
    """Read seen/correct/wrong, requiring seen == correct + wrong."""
    seen = int(data.get("seen", 0))
    correct = int(data.get("correct", 0))
    wrong = int(data.get("wrong", 0))
    if min(seen, correct, wrong) < 0:
        raise ValueError("Counters must not be negative")
    if seen != correct + wrong:
        raise ValueError(f"seen={seen} does not equal correct={correct} + wrong={wrong}")
    return seen, correct, wrong


@dataclass
class TopicState:
    """Mastery state for one topic."""

    rating: int = DEFAULT_RATING
    seen: int = 0
    correct: int = 0
    wrong: int = 0
    fatigue: float = 0.0  # review pressure, not consumed by selection
    last: datetime | None = None

    @property
    def wrong_rate(self) -> float | None:
        if not self.seen:
            return None
        return self.wrong / self.seen

    def to_dict(self) -> dict[str, Any]:
        return {
            "rating": self.rating,
            "seen": self.seen,
            "correct": self.correct,
            "wrong": self.wrong,
            "fatigue": self.fatigue,
            "last": _ts(self.last),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TopicState:
        data = _record(data, "topic state")
        rating = int(data.get("rating", DEFAULT_RATING))
        if not MIN_RATING <= rating <= MAX_RATING:
            raise ValueError(f"Rating {rating} outside {MIN_RATING}-{MAX_RATING}")
        seen, correct, wrong = _counters(data)
        return cls(
            rating=rating,
            seen=seen,
            correct=correct,
            wrong=wrong,
            fatigue=float(data.get("fatigue", 0.0)),
            last=_parse_ts(data.get("last")),
        )


@dataclass
class ItemState:
    """Exposure counters for one item."""

    seen: int = 0
    correct: int = 0
    wrong: int = 0
    last_seen: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "seen": self.seen,
            "correct": self.correct,
            "wrong": self.wrong,
            "last_seen": _ts(self.last_seen),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ItemState:
        seen, correct, wrong = _counters(_record(data, "item state"))
        return cls(
            seen=seen,
            correct=correct,
            wrong=wrong,
            last_seen=_parse_ts(data.get("last_seen")),
        )


@dataclass
class HistoryEntry:
    """A single recorded result."""

    id: str
    subject: str | None
    topic: TopicKey | None
    correct: bool
    timestamp: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "subject": self.subject,
            "topic": list(self.topic) if self.topic else None,
            "correct": self.correct,
            "timestamp": _ts(self.timestamp),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HistoryEntry:
        data = _record(data, "history entry")
        topic = data.get("topic")
        if topic and not (isinstance(topic, list) and len(topic) == 2):
            raise ValueError(f"Malformed history topic: {topic!r}")
        timestamp = _parse_ts(data["timestamp"])
        if timestamp is None:
            raise ValueError("History entry without a timestamp")
        return cls(
            id=str(data["id"]),
            subject=data.get("subject"),
            topic=TopicKey(str(topic[0]), str(topic[1])) if topic else None,
            correct=bool(data.get("correct", False)),
            timestamp=timestamp,
        )


@dataclass
class LearnerModel:
    """Root aggregate: the only persisted entity."""

    topics: dict[TopicKey, TopicState] = field(default_factory=dict)
    items: dict[str, ItemState] = field(default_factory=dict)
    history: list[HistoryEntry] = field(default_factory=list)

    def topic_state(self, key: TopicKey) -> TopicState:
        """Get the state for a topic, creating a default one if missing."""
        if key not in self.topics:
            self.topics[key] = TopicState()
        return self.topics[key]

    def item_state(self, item_id: str) -> ItemState:
        if item_id not in self.items:
            self.items[item_id] = ItemState()
        return self.items[item_id]

    def times_shown(self, item_id: str) -> int:
        state = self.items.get(item_id)
        return state.seen if state else 0

    def recent_ids(self, window: int) -> set[str]:
        """Item ids in the last `window` history entries."""
        if window <= 0:
            return set()
        return {entry.id for entry in self.history[-window:]}

    def to_dict(self) -> dict[str, Any]:
        return {
            "topics": [
                {"subject": key.subject, "topic": key.topic, **state.to_dict()}
                for key, state in self.topics.items()
            ],
            "items": {item_id: state.to_dict() for item_id, state in self.items.items()},
            "history": [entry.to_dict() for entry in self.history],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LearnerModel:
        """
        Rebuild a model from its JSON form.

        Raises KeyError/TypeError/ValueError on malformed input; callers
        decide whether that fails open.
        """
        if not isinstance(data, dict):
            raise TypeError(f"Expected an object, got {type(data).__name__}")

        topic_records = data.get("topics") or []
        item_records = data.get("items") or {}
        history_records = data.get("history") or []
        if not isinstance(topic_records, list) or not isinstance(history_records, list):
            raise TypeError("Expected topics and history to be lists")
        if not isinstance(item_records, dict):
            raise TypeError("Expected items to be an object")

        topics: dict[TopicKey, TopicState] = {}
        for record in topic_records:
            record = _record(record, "topic record")
            key = TopicKey.for_values(record["subject"], record.get("topic"))
            if key is None:
                raise ValueError("Topic record without a subject")
            topics[key] = TopicState.from_dict(record)

        items = {
            str(item_id): ItemState.from_dict(record)
            for item_id, record in item_records.items()
        }
        history = [HistoryEntry.from_dict(record) for record in history_records]

        return cls(topics=topics, items=items, history=history)

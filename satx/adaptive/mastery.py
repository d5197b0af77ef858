"""
Topic Mastery Tracking with ELO-style Updates.

Each (subject, topic) pair carries a rating on a 400-1600 scale. After
every graded attempt the rating moves toward the observed outcome:

    expected = 1 / (1 + 10 ** ((difficulty - rating) / 400))
    rating  += k * (actual - expected)

Misses use a larger k than hits, so a wrong answer corrects the estimate
downward faster than a right answer drifts it upward.

Item difficulty comes from, in order: an explicit authoring value, a
topic-name heuristic table, or the topic rating with a little jitter.
"""

from __future__ import annotations

import random
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import UTC, datetime

from loguru import logger

from satx.adaptive.catalog import Item
from satx.adaptive.models import (
    DEFAULT_RATING,
    MAX_RATING,
    MIN_RATING,
    HistoryEntry,
    LearnerModel,
    TopicState,
)
from satx.adaptive.store import ModelRepository

# =============================================================================
# Configuration
# =============================================================================


@dataclass(frozen=True)
class EngineConfig:
    """Tunable constants for rating, selection and history."""

    min_rating: int = MIN_RATING
    max_rating: int = MAX_RATING
    initial_rating: int = DEFAULT_RATING
    k_correct: int = 22
    k_wrong: int = 28

    fatigue_correct: float = -0.15
    fatigue_wrong: float = 0.35
    min_fatigue: float = -1.0
    max_fatigue: float = 2.0

    difficulty_jitter: int = 60
    history_limit: int = 500

    # Selection
    anti_repeat_window: int = 5
    review_injection_rate: float = 0.15
    unseen_wrong_rate: float = 0.4
    min_topic_weight: float = 0.05
    max_topic_weight: float = 3.0
    overexposure_penalty: float = 0.05
    score_jitter: float = 30.0


# Checked in order; first match wins.
TOPIC_DIFFICULTY_TABLE: tuple[tuple[tuple[str, ...], int], ...] = (
    (("quadratic", "exponent", "system", "function"), 950),
    (("percent", "ratio", "proportion", "slope", "linear"), 800),
    (("inference", "evidence", "logic", "consistency"), 900),
    (("vocab", "context", "connotation", "tone", "precision"), 750),
)

# (days since last attempt, factor), checked from the longest gap down
STALENESS_STEPS: tuple[tuple[float, float], ...] = (
    (7, 1.4),
    (3, 1.25),
    (1, 1.1),
)
NEVER_SEEN_STALENESS = 1.4


def clamp(value, lo, hi):
    return max(lo, min(hi, value))


def utcnow() -> datetime:
    return datetime.now(UTC)


# =============================================================================
# Pure Helpers
# =============================================================================


def fixed_difficulty(item: Item, config: EngineConfig | None = None) -> int | None:
    """Difficulty from the authoring value or the topic table, None if neither applies."""
    cfg = config or EngineConfig()

    if item.difficulty is not None:
        return clamp(round(item.difficulty), cfg.min_rating, cfg.max_rating)

    topic = (item.topic or "").lower()
    for needles, difficulty in TOPIC_DIFFICULTY_TABLE:
        if any(needle in topic for needle in needles):
            return difficulty
    return None


def infer_difficulty(
    item: Item,
    fallback: float,
    rng: random.Random,
    config: EngineConfig | None = None,
) -> int:
    """
    Assign a difficulty on the rating scale to an item.

    Args:
        item: The quiz item
        fallback: Center used when neither the item nor its topic says
            anything (normally the current topic rating)
        rng: Random source for the fallback jitter
        config: Engine constants

    Returns:
        Difficulty in [min_rating, max_rating]
    """
    cfg = config or EngineConfig()

    known = fixed_difficulty(item, cfg)
    if known is not None:
        return known

    jitter = rng.uniform(-cfg.difficulty_jitter, cfg.difficulty_jitter)
    return clamp(round(fallback + jitter), cfg.min_rating, cfg.max_rating)


def expected_score(rating: float, difficulty: float) -> float:
    """Probability of a correct answer under the ELO model."""
    return 1 / (1 + 10 ** ((difficulty - rating) / 400))


def updated_rating(rating: int, difficulty: int, was_correct: bool, config: EngineConfig) -> int:
    """Apply one ELO step and clamp the result."""
    expected = expected_score(rating, difficulty)
    actual = 1 if was_correct else 0
    k = config.k_correct if was_correct else config.k_wrong
    return clamp(round(rating + k * (actual - expected)), config.min_rating, config.max_rating)


def staleness_factor(last: datetime | None, now: datetime) -> float:
    """Boost for topics that have not been practiced recently."""
    if last is None:
        return NEVER_SEEN_STALENESS

    days = (now - last).total_seconds() / 86400
    for threshold, factor in STALENESS_STEPS:
        if days > threshold:
            return factor
    return 1.0


# =============================================================================
# Mastery Engine
# =============================================================================


class MasteryEngine:
    """
    Owns the learner model and all updates to it.

    The in-memory model is authoritative once loaded: a failed write
    loses durability, not the session's state.
    """

    def __init__(
        self,
        repository: ModelRepository,
        config: EngineConfig | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        """
        Initialize the engine.

        Args:
            repository: Where the model blob is read from and written to
            config: Engine constants (defaults if None)
            rng: Random source (a fresh unseeded one if None)
            clock: Returns the current time (UTC now if None)
        """
        self.repository = repository
        self.config = config or EngineConfig()
        self.rng = rng or random.Random()
        self.clock = clock or utcnow
        self._model: LearnerModel | None = None

    @property
    def model(self) -> LearnerModel:
        """The current model, loaded from the repository on first access."""
        if self._model is None:
            self._model = self.repository.load() or LearnerModel()
        return self._model

    def new_topic_state(self) -> TopicState:
        return TopicState(rating=self.config.initial_rating)

    def init_model(self, catalog: Iterable[Item]) -> LearnerModel:
        """
        Make sure every quiz topic in the catalog has a state entry.

        Existing topic state is never touched, so this is safe to call
        before every operation.
        """
        model = self.model
        added = 0
        for item in catalog:
            if not item.is_quiz:
                continue
            key = item.topic_key
            if key is not None and key not in model.topics:
                model.topics[key] = self.new_topic_state()
                added += 1

        if added:
            logger.debug(f"Seeded {added} new topics")
        self.repository.save(model)
        return model

    def infer_difficulty(self, item: Item, fallback: float) -> int:
        return infer_difficulty(item, fallback, self.rng, self.config)

    def staleness(self, state: TopicState) -> float:
        return staleness_factor(state.last, self.clock())

    def record_result(self, item: Item, was_correct: bool) -> None:
        """
        Record one graded attempt.

        Must be called exactly once per attempt. Items without an id are
        ignored.
        """
        if not item.id:
            return

        cfg = self.config
        model = self.model
        now = self.clock()
        was_correct = bool(was_correct)

        item_state = model.item_state(item.id)
        item_state.seen += 1
        item_state.last_seen = now
        if was_correct:
            item_state.correct += 1
        else:
            item_state.wrong += 1

        key = item.topic_key
        if key is not None:
            if key not in model.topics:
                model.topics[key] = self.new_topic_state()
            topic = model.topics[key]

            difficulty = self.infer_difficulty(item, topic.rating)
            old_rating = topic.rating
            topic.rating = updated_rating(topic.rating, difficulty, was_correct, cfg)

            topic.seen += 1
            if was_correct:
                topic.correct += 1
            else:
                topic.wrong += 1

            delta = cfg.fatigue_correct if was_correct else cfg.fatigue_wrong
            topic.fatigue = clamp(topic.fatigue + delta, cfg.min_fatigue, cfg.max_fatigue)
            topic.last = now

            logger.debug(
                f"Recorded {item.id} ({'correct' if was_correct else 'wrong'}): "
                f"{key} {old_rating} -> {topic.rating} vs difficulty {difficulty}"
            )

        model.history.append(
            HistoryEntry(
                id=item.id,
                subject=item.subject,
                topic=key,
                correct=was_correct,
                timestamp=now,
            )
        )
        if len(model.history) > cfg.history_limit:
            del model.history[: len(model.history) - cfg.history_limit]

        self.repository.save(model)

    def replace(self, model: LearnerModel) -> None:
        """Swap in a whole model (import) and persist it."""
        self._model = model
        self.repository.save(model)

    def reset(self) -> None:
        """Forget all progress; the next access starts from an empty model."""
        self.repository.clear()
        self._model = None
        logger.info("Learner model reset")

"""
Next-Item Selection.

Picks one quiz for a subject in two stages:
1. Topic: weighted draw favouring low ratings, high error rates and
   topics that have gone stale
2. Item: within that topic, the not-recently-shown item whose difficulty
   sits closest to the topic rating, with a small exposure penalty and
   random jitter so near-ties do not freeze into a fixed order

Occasionally the pick is replaced by a random item from the subject's
weakest topic, so that topic gets reviewed even when the draw avoids it.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from loguru import logger

from satx.adaptive.catalog import Item
from satx.adaptive.mastery import MasteryEngine, clamp
from satx.adaptive.models import LearnerModel, TopicKey, TopicState


@dataclass
class TopicWeight:
    """Selection weight for one topic."""

    key: TopicKey
    weight: float


class ItemSelector:
    """Chooses the best next item using the mastery engine's state."""

    def __init__(self, mastery: MasteryEngine):
        self.mastery = mastery

    @property
    def config(self):
        return self.mastery.config

    @property
    def rng(self):
        return self.mastery.rng

    # =========================================================================
    # Topic weighting
    # =========================================================================

    def topic_weight(self, state: TopicState) -> float:
        """
        Weight for one topic.

        Falls with rating, rises with wrong-rate and staleness. Unseen
        topics count as moderately weak to get initial coverage.
        """
        cfg = self.config
        wrong_rate = state.wrong_rate
        if wrong_rate is None:
            wrong_rate = cfg.unseen_wrong_rate

        mastery_term = 1.2 - (state.rating - cfg.min_rating) / 1600
        weight = mastery_term * (0.7 + wrong_rate) * self.mastery.staleness(state)
        return clamp(weight, cfg.min_topic_weight, cfg.max_topic_weight)

    def weigh_topics(self, model: LearnerModel, keys: Sequence[TopicKey]) -> list[TopicWeight]:
        return [
            TopicWeight(key, self.topic_weight(model.topics.get(key) or self.mastery.new_topic_state()))
            for key in keys
        ]

    def weighted_pick(self, weighted: Sequence[TopicWeight]) -> TopicKey:
        """Cumulative-weight draw over the topics."""
        remainder = self.rng.random() * sum(w.weight for w in weighted)
        for entry in weighted:
            remainder -= entry.weight
            if remainder <= 0:
                return entry.key
        return weighted[0].key

    # =========================================================================
    # Item scoring
    # =========================================================================

    def score(self, item: Item, target: int, model: LearnerModel) -> float:
        """Lower is better."""
        gap = abs(self.mastery.infer_difficulty(item, target) - target)
        shown = model.times_shown(item.id)
        penalty = self.config.overexposure_penalty * shown if shown > 0 else 0.0
        jitter = self.rng.random() * self.config.score_jitter
        return gap + penalty + jitter

    def weakest_topic(self, model: LearnerModel, keys: Sequence[TopicKey]) -> TopicKey:
        """Lowest-rated topic; the first one wins ties."""
        return min(
            keys,
            key=lambda k: (model.topics.get(k) or self.mastery.new_topic_state()).rating,
        )

    # =========================================================================
    # Selection
    # =========================================================================

    def next_item(self, subject: str, catalog: Iterable[Item]) -> Item | None:
        """
        Return the next quiz for a subject.

        Args:
            subject: Subject name (case-insensitive)
            catalog: All items; only the subject's quizzes are considered

        Returns:
            The chosen item, or None when the subject has no quizzes
        """
        catalog = list(catalog)
        model = self.mastery.init_model(catalog)

        pool = [item for item in catalog if item.is_quiz and item.in_subject(subject)]
        if not pool:
            return None

        topics = list(dict.fromkeys(item.topic_key for item in pool if item.topic_key))
        if not topics:
            return self.rng.choice(pool)

        picked = self.weighted_pick(self.weigh_topics(model, topics))
        target = (model.topics.get(picked) or self.mastery.new_topic_state()).rating

        candidates = [item for item in pool if item.topic_key == picked]
        if not candidates:
            return self.rng.choice(pool)

        avoid = model.recent_ids(self.config.anti_repeat_window)
        fresh = [item for item in candidates if item.id not in avoid]
        ranked = sorted(fresh, key=lambda item: self.score(item, target, model))

        if self.rng.random() < self.config.review_injection_rate:
            weak = self.weakest_topic(model, topics)
            weak_pool = [
                item for item in pool if item.topic_key == weak and item.id not in avoid
            ]
            if weak_pool:
                choice = self.rng.choice(weak_pool)
                logger.debug(f"Review injection from weakest topic {weak}: {choice.id}")
                return choice

        if ranked:
            return ranked[0]
        return self.rng.choice(candidates)

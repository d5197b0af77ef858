"""
Unit tests for ItemSelector.

Tests:
- Topic weights and cumulative-weight draw
- Anti-repeat window
- Difficulty-gap scoring with exposure penalty
- Weak-topic review injection
- Determinism under a fixed seed
"""

import pytest

from satx.adaptive.catalog import ItemCatalog
from satx.adaptive.models import ItemState, TopicKey, TopicState
from satx.adaptive.selector import ItemSelector, TopicWeight
from tests.helpers import StubRandom, lesson, quiz

ALGEBRA = TopicKey("math", "algebra")
GEOMETRY = TopicKey("math", "geometry")
PERCENT = TopicKey("math", "percent")


class TestTopicWeight:
    """Tests for per-topic selection weights."""

    def test_unseen_topic(self, engine):
        weight = engine.selector.topic_weight(TopicState())

        # (1.2 - 0.25) * (0.7 + 0.4) * 1.4
        assert weight == pytest.approx(1.463)

    def test_practiced_topic(self, engine, clock):
        state = TopicState(rating=800, seen=4, correct=2, wrong=2, last=clock.now)
        clock.advance(days=2)

        # (1.2 - 0.25) * (0.7 + 0.5) * 1.1
        assert engine.selector.topic_weight(state) == pytest.approx(1.254)

    def test_strongest_fresh_topic(self, engine, clock):
        strong = TopicState(rating=1600, seen=10, correct=10, wrong=0, last=clock.now)

        # (1.2 - 0.75) * (0.7 + 0.0) * 1.0
        assert engine.selector.topic_weight(strong) == pytest.approx(0.315)

    def test_weight_floor(self, make_engine, clock):
        engine = make_engine(min_topic_weight=0.5)

        strong = TopicState(rating=1600, seen=10, correct=10, wrong=0, last=clock.now)
        assert engine.selector.topic_weight(strong) == pytest.approx(0.5)

    def test_weight_ceiling(self, make_engine):
        engine = make_engine(max_topic_weight=2.0)

        # 1.2 * 1.7 * 1.4 would be 2.856
        weak = TopicState(rating=400, seen=10, correct=0, wrong=10, last=None)
        assert engine.selector.topic_weight(weak) == pytest.approx(2.0)

    def test_weaker_topics_weigh_more(self, engine, clock):
        low = TopicState(rating=600, seen=3, wrong=1, correct=2, last=clock.now)
        high = TopicState(rating=1000, seen=3, wrong=1, correct=2, last=clock.now)

        assert engine.selector.topic_weight(low) > engine.selector.topic_weight(high)


class TestWeightedPick:
    """Tests for the cumulative-weight draw."""

    def _selector(self, engine, value):
        engine.mastery.rng = StubRandom(value=value)
        return ItemSelector(engine.mastery)

    def test_low_draw_picks_first(self, engine):
        selector = self._selector(engine, 0.0)
        weighted = [TopicWeight(ALGEBRA, 1.0), TopicWeight(GEOMETRY, 1.0), TopicWeight(PERCENT, 1.0)]

        assert selector.weighted_pick(weighted) == ALGEBRA

    def test_high_draw_picks_last(self, engine):
        selector = self._selector(engine, 0.99)
        weighted = [TopicWeight(ALGEBRA, 1.0), TopicWeight(GEOMETRY, 1.0), TopicWeight(PERCENT, 1.0)]

        assert selector.weighted_pick(weighted) == PERCENT

    def test_draw_respects_weights(self, engine):
        selector = self._selector(engine, 0.5)
        weighted = [TopicWeight(ALGEBRA, 0.1), TopicWeight(GEOMETRY, 2.9)]

        assert selector.weighted_pick(weighted) == GEOMETRY


class TestWeakestTopic:
    def test_lowest_rating(self, engine):
        model = engine.model
        model.topics[ALGEBRA] = TopicState(rating=900)
        model.topics[GEOMETRY] = TopicState(rating=650)

        assert engine.selector.weakest_topic(model, [ALGEBRA, GEOMETRY]) == GEOMETRY

    def test_first_wins_ties(self, engine):
        model = engine.model
        model.topics[ALGEBRA] = TopicState(rating=700)
        model.topics[GEOMETRY] = TopicState(rating=700)

        assert engine.selector.weakest_topic(model, [GEOMETRY, ALGEBRA]) == GEOMETRY


class TestNextItem:
    """Tests for full next-item selection."""

    def test_unknown_subject_returns_none(self, engine, math_catalog):
        assert engine.next_item("history", math_catalog) is None

    def test_lessons_only_subject_returns_none(self, engine):
        catalog = ItemCatalog([lesson("art-intro", subject="art")])
        assert engine.next_item("art", catalog) is None

    def test_returns_quiz_of_subject(self, engine, math_catalog):
        for _ in range(20):
            item = engine.next_item("MATH", math_catalog)
            assert item.is_quiz
            assert item.subject == "math"

    def test_seeds_model(self, engine, math_catalog):
        engine.next_item("math", math_catalog)
        assert TopicKey("math", "quadratics") in engine.model.topics

    def test_anti_repeat_window(self, make_engine):
        engine = make_engine(review_injection_rate=0.0)
        catalog = ItemCatalog([quiz(f"a{i}") for i in range(8)])

        for i in range(40):
            recent = [entry.id for entry in engine.model.history[-5:]]
            item = engine.next_item("math", catalog)
            assert item.id not in recent
            engine.record_result(item, i % 3 != 0)

    def test_review_injection_picks_weakest_topic(self, make_engine):
        engine = make_engine(review_injection_rate=1.0)
        catalog = ItemCatalog([
            quiz("alg1", topic="Algebra"),
            quiz("alg2", topic="Algebra"),
            quiz("geo1", topic="Geometry"),
            quiz("geo2", topic="Geometry"),
        ])
        engine.model.topics[ALGEBRA] = TopicState(rating=1200)
        engine.model.topics[GEOMETRY] = TopicState(rating=550)

        for _ in range(20):
            assert engine.next_item("math", catalog).topic_key == GEOMETRY

    def test_review_injection_respects_anti_repeat(self, make_engine):
        engine = make_engine(review_injection_rate=1.0)
        catalog = ItemCatalog([quiz("geo1", topic="Geometry"), quiz("geo2", topic="Geometry")])
        engine.record_result(catalog.get("geo1"), False)

        for _ in range(10):
            assert engine.next_item("math", catalog).id == "geo2"

    def test_closest_difficulty_wins(self, make_engine):
        engine = make_engine(review_injection_rate=0.0, score_jitter=0.0)
        catalog = ItemCatalog([
            quiz("easy", difficulty=500),
            quiz("near", difficulty=790),
            quiz("hard", difficulty=1300),
        ])

        assert engine.next_item("math", catalog).id == "near"

    def test_less_shown_item_wins_ties(self, make_engine):
        engine = make_engine(review_injection_rate=0.0, score_jitter=0.0)
        catalog = ItemCatalog([quiz("a", difficulty=800), quiz("b", difficulty=800)])
        engine.model.items["a"] = ItemState(seen=3, correct=3)

        assert engine.next_item("math", catalog).id == "b"

    def test_falls_back_when_all_candidates_recent(self, make_engine):
        engine = make_engine(review_injection_rate=0.0)
        catalog = ItemCatalog([quiz("a"), quiz("b")])
        engine.record_result(catalog.get("a"), True)
        engine.record_result(catalog.get("b"), True)

        item = engine.next_item("math", catalog)
        assert item.id in {"a", "b"}

    def test_same_seed_same_sequence(self, make_engine, bundled_catalog):
        def run(engine):
            picks = []
            for i in range(25):
                item = engine.next_item("math", bundled_catalog)
                picks.append(item.id)
                engine.record_result(item, i % 2 == 0)
            return picks

        assert run(make_engine(seed=42)) == run(make_engine(seed=42))

"""
Unit tests for FeedBuilder.

Tests:
- Feed shape: [intro] + quizzes + [summary]
- Distinct quizzes, bounded by count and pool size
- Completed ids are excluded
- Intro/summary lookup stays inside the subject
"""

from satx.adaptive.catalog import ItemCatalog
from satx.adaptive.feed import find_intro, find_summary
from tests.helpers import lesson, quiz


def quiz_ids(feed):
    return [item.id for item in feed if item.is_quiz]


class TestFeedShape:
    """Tests for feed ordering and bounds."""

    def test_intro_first_summary_last(self, engine, math_catalog):
        feed = engine.build_adaptive_feed("math", math_catalog, count=4)

        assert feed[0].id == "math-intro"
        assert feed[-1].id == "math-summary"
        assert len(quiz_ids(feed)) == 4
        assert all(item.is_quiz for item in feed[1:-1])

    def test_quizzes_are_distinct(self, engine, bundled_catalog):
        feed = engine.build_adaptive_feed("reading", bundled_catalog, count=8)

        ids = quiz_ids(feed)
        assert len(ids) == len(set(ids)) == 8
        assert all(item.subject == "reading" for item in feed)

    def test_count_larger_than_pool(self, engine, math_catalog):
        feed = engine.build_adaptive_feed("math", math_catalog, count=20)

        assert sorted(quiz_ids(feed)) == ["m1", "m2", "m3", "m4", "m5", "m6"]
        assert len(feed) == 8

    def test_zero_count(self, engine, math_catalog):
        feed = engine.build_adaptive_feed("math", math_catalog, count=0)
        assert [item.id for item in feed] == ["math-intro", "math-summary"]

    def test_completed_ids_are_excluded(self, engine, math_catalog):
        feed = engine.build_adaptive_feed(
            "math", math_catalog, count=20, completed_ids=["m1", "m3", "m5"]
        )

        assert sorted(quiz_ids(feed)) == ["m2", "m4", "m6"]

    def test_all_completed(self, engine, math_catalog):
        completed = [f"m{i}" for i in range(1, 7)]
        feed = engine.build_adaptive_feed("math", math_catalog, count=5, completed_ids=completed)

        assert quiz_ids(feed) == []
        assert [item.id for item in feed] == ["math-intro", "math-summary"]

    def test_unknown_subject_is_empty(self, engine, math_catalog):
        assert engine.build_adaptive_feed("history", math_catalog, count=5) == []

    def test_lessons_only_subject(self, engine):
        catalog = ItemCatalog([
            lesson("art-intro", subject="art"),
            lesson("art-summary", subject="art", title="Summary: Art"),
        ])

        feed = engine.build_adaptive_feed("art", catalog, count=5)
        assert [item.id for item in feed] == ["art-intro", "art-summary"]

    def test_feed_does_not_record_results(self, engine, math_catalog):
        engine.build_adaptive_feed("math", math_catalog, count=4)

        assert engine.model.history == []
        assert engine.model.items == {}


class TestLessonLookup:
    """Tests for intro and summary detection."""

    def test_intro_matches_id(self, math_catalog):
        assert find_intro("math", math_catalog).id == "math-intro"
        assert find_intro("reading", math_catalog).id == "reading-intro"

    def test_no_intro(self):
        catalog = ItemCatalog([lesson("welcome", title="Welcome")])
        assert find_intro("math", catalog) is None

    def test_summary_by_title(self, math_catalog):
        assert find_summary("math", math_catalog).id == "math-summary"

    def test_summary_by_id_suffix(self):
        catalog = ItemCatalog([lesson("math-intro"), lesson("algebra-end", title="Wrap up")])
        assert find_summary("math", catalog).id == "algebra-end"

    def test_summary_title_must_start_with_prefix(self):
        catalog = ItemCatalog([lesson("recap", title="A summary: not really")])
        assert find_summary("math", catalog) is None

    def test_summary_is_scoped_to_subject(self, engine):
        catalog = ItemCatalog([
            lesson("math-intro"),
            quiz("m1"),
            lesson("reading-end", subject="reading", title="Done"),
            lesson("reading-summary", subject="reading", title="Summary: Reading"),
        ])

        assert find_summary("math", catalog) is None
        feed = engine.build_adaptive_feed("math", catalog, count=3)
        assert [item.id for item in feed] == ["math-intro", "m1"]

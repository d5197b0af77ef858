"""
Mastery Dashboard.

Projects topic state into display records and summarizes it:
overall rating and level, three strongest and three weakest topics.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any

from satx.adaptive.catalog import Item
from satx.adaptive.mastery import MasteryEngine

# Overall rating only counts topics with at least this many attempts
# (unless none qualify).
MIN_SEEN_FOR_OVERALL = 3
HIGHLIGHT_COUNT = 3

# Upper bounds (exclusive) for each level; anything above is Platinum.
LEVELS: tuple[tuple[int, str], ...] = (
    (700, "Bronze"),
    (900, "Silver"),
    (1100, "Gold"),
)


def level_for(rating: float) -> str:
    """Qualitative tier for a rating."""
    for bound, name in LEVELS:
        if rating < bound:
            return name
    return "Platinum"


@dataclass
class TopicReport:
    """One topic as shown on the dashboard."""

    subject: str
    topic: str
    rating: int
    level: str
    seen: int
    correct: int
    wrong: int
    accuracy: int | None  # percent
    fatigue: float
    last: datetime | None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["last"] = self.last.isoformat() if self.last else None
        return data


@dataclass
class OverallReport:
    rating: int
    level: str


@dataclass
class Dashboard:
    """Summary of the learner's mastery."""

    topics: list[TopicReport] = field(default_factory=list)
    overall: OverallReport = field(default_factory=lambda: OverallReport(800, level_for(800)))
    weaknesses: list[TopicReport] = field(default_factory=list)
    strengths: list[TopicReport] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "topics": [t.to_dict() for t in self.topics],
            "overall": asdict(self.overall),
            "weaknesses": [t.to_dict() for t in self.weaknesses],
            "strengths": [t.to_dict() for t in self.strengths],
        }


class DashboardReporter:
    """Builds dashboards from the mastery engine's model."""

    def __init__(self, mastery: MasteryEngine):
        self.mastery = mastery

    def get_dashboard(self, catalog: Iterable[Item]) -> Dashboard:
        model = self.mastery.init_model(catalog)

        topics = [
            TopicReport(
                subject=key.subject,
                topic=key.topic,
                rating=state.rating,
                level=level_for(state.rating),
                seen=state.seen,
                correct=state.correct,
                wrong=state.wrong,
                accuracy=round(state.correct / state.seen * 100) if state.seen else None,
                fatigue=state.fatigue,
                last=state.last,
            )
            for key, state in model.topics.items()
        ]

        practiced = [t for t in topics if t.seen >= MIN_SEEN_FOR_OVERALL]
        pool = practiced or topics
        if pool:
            overall_rating = round(sum(t.rating for t in pool) / len(pool))
        else:
            overall_rating = self.mastery.config.initial_rating

        # sorted() is stable, so ties keep model order
        weaknesses = sorted(topics, key=lambda t: t.rating)[:HIGHLIGHT_COUNT]
        strengths = sorted(topics, key=lambda t: t.rating, reverse=True)[:HIGHLIGHT_COUNT]

        return Dashboard(
            topics=topics,
            overall=OverallReport(rating=overall_rating, level=level_for(overall_rating)),
            weaknesses=weaknesses,
            strengths=strengths,
        )

"""Shared test doubles and item builders."""
from datetime import datetime, timedelta

from satx.adaptive.catalog import Item


class FixedClock:
    """Clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class StubRandom:
    """Random source with fixed outputs."""

    def __init__(self, value: float = 0.0, uniform_value: float = 0.0):
        self.value = value
        self.uniform_value = uniform_value

    def random(self) -> float:
        return self.value

    def uniform(self, a: float, b: float) -> float:
        return self.uniform_value

    def choice(self, seq):
        return seq[0]


def quiz(item_id: str, subject: str = "math", topic: str | None = "algebra", **kwargs) -> Item:
    """Shorthand for building quiz items."""
    return Item(id=item_id, type="quiz", subject=subject, topic=topic, **kwargs)


def lesson(item_id: str, subject: str = "math", title: str | None = None) -> Item:
    return Item(id=item_id, type="lesson", subject=subject, title=title)

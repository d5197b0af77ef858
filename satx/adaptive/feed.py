"""
Adaptive Session Feed.

Builds an ordered playlist for one subject:

    [intro lesson?] + quizzes chosen one at a time by the selector + [summary lesson?]

Quizzes already completed, or already placed in this feed, are never
repeated. The selector is retried at most `count * 10` times so a small
pool or a starved anti-repeat window cannot loop forever.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from loguru import logger

from satx.adaptive.catalog import Item
from satx.adaptive.selector import ItemSelector

INTRO_PATTERN = re.compile(r"intro", re.IGNORECASE)
SUMMARY_TITLE_PATTERN = re.compile(r"^summary:", re.IGNORECASE)
SUMMARY_ID_SUFFIX = "-end"

DEFAULT_FEED_COUNT = 20
RETRY_FACTOR = 10


def find_intro(subject: str, catalog: Iterable[Item]) -> Item | None:
    """First lesson of the subject whose id (or title) mentions an intro."""
    for item in catalog:
        if item.is_lesson and item.in_subject(subject):
            if INTRO_PATTERN.search(item.id or item.title or ""):
                return item
    return None


def find_summary(subject: str, catalog: Iterable[Item]) -> Item | None:
    """First lesson of the subject titled "Summary: ..." or with an id ending in -end."""
    for item in catalog:
        if item.is_lesson and item.in_subject(subject):
            if SUMMARY_TITLE_PATTERN.search(item.title or "") or (item.id or "").endswith(
                SUMMARY_ID_SUFFIX
            ):
                return item
    return None


class FeedBuilder:
    """Loops the selector into a bounded, de-duplicated session."""

    def __init__(self, selector: ItemSelector):
        self.selector = selector

    def build_adaptive_feed(
        self,
        subject: str,
        catalog: Iterable[Item],
        count: int = DEFAULT_FEED_COUNT,
        completed_ids: Iterable[str] | None = None,
    ) -> list[Item]:
        """
        Build a session feed.

        Args:
            subject: Subject to practice
            catalog: All items
            count: Number of quizzes wanted
            completed_ids: Quiz ids that must not be selected again

        Returns:
            [intro?] + up to `count` distinct quizzes + [summary?]
        """
        catalog = list(catalog)
        self.selector.mastery.init_model(catalog)

        intro = find_intro(subject, catalog)
        summary = find_summary(subject, catalog)

        used: set[str] = set(completed_ids or ())
        quizzes: list[Item] = []
        attempts = 0

        while len(quizzes) < count and attempts < count * RETRY_FACTOR:
            attempts += 1
            item = self.selector.next_item(subject, catalog)
            if item is None:
                break
            if item.id in used:
                continue
            used.add(item.id)
            quizzes.append(item)

        logger.info(
            f"Feed for {subject}: {len(quizzes)}/{count} quizzes after {attempts} draws"
        )

        feed: list[Item] = []
        if intro:
            feed.append(intro)
        feed.extend(quizzes)
        if summary:
            feed.append(summary)
        return feed

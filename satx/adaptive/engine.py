"""
Adaptive Engine.

Main orchestration layer: one learner model, one random source, and the
components that read and update it.

Usage:
    engine = AdaptiveEngine.from_settings()
    catalog = ItemCatalog.bundled()

    item = engine.next_item("math", catalog)
    engine.record_result(item, was_correct=True)
    feed = engine.build_adaptive_feed("math", catalog, count=10)
    dashboard = engine.get_dashboard(catalog)

Independent engines (e.g. in tests) never share state: each owns its
repository handle and in-memory model.
"""

from __future__ import annotations

import random
from collections.abc import Callable, Iterable
from datetime import datetime
from pathlib import Path
from typing import Any

from loguru import logger

from satx.adaptive.catalog import Item
from satx.adaptive.dashboard import Dashboard, DashboardReporter
from satx.adaptive.feed import DEFAULT_FEED_COUNT, FeedBuilder
from satx.adaptive.mastery import EngineConfig, MasteryEngine
from satx.adaptive.models import LearnerModel
from satx.adaptive.selector import ItemSelector
from satx.adaptive.store import (
    KeyValueStore,
    MemoryKeyValueStore,
    ModelRepository,
    SqliteKeyValueStore,
)
from satx.exceptions import ModelImportError


class AdaptiveEngine:
    """Facade over mastery tracking, selection, feeds and reporting."""

    def __init__(
        self,
        store: KeyValueStore | None = None,
        config: EngineConfig | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        """
        Initialize the engine.

        Args:
            store: Key-value store for the model blob (in-memory if None)
            config: Engine constants
            rng: Random source; pass a seeded Random for reproducible runs
            clock: Current-time provider
        """
        self.repository = ModelRepository(store if store is not None else MemoryKeyValueStore())
        self.mastery = MasteryEngine(self.repository, config=config, rng=rng, clock=clock)
        self.selector = ItemSelector(self.mastery)
        self.feed_builder = FeedBuilder(self.selector)
        self.reporter = DashboardReporter(self.mastery)

    @classmethod
    def from_settings(cls, settings=None) -> AdaptiveEngine:
        """Build an engine backed by the configured SQLite state file."""
        if settings is None:
            from config import get_settings

            settings = get_settings()

        rng = random.Random(settings.random_seed) if settings.random_seed is not None else None
        store = SqliteKeyValueStore(Path(settings.state_db_path).expanduser())
        return cls(store=store, config=settings.get_engine_config(), rng=rng)

    @property
    def model(self) -> LearnerModel:
        return self.mastery.model

    # =========================================================================
    # Core operations
    # =========================================================================

    def init_model(self, catalog: Iterable[Item]) -> LearnerModel:
        return self.mastery.init_model(catalog)

    def record_result(self, item: Item, was_correct: bool) -> None:
        self.mastery.record_result(item, was_correct)

    def infer_difficulty(self, item: Item, fallback: float | None = None) -> int:
        if fallback is None:
            fallback = self.mastery.config.initial_rating
        return self.mastery.infer_difficulty(item, fallback)

    def next_item(self, subject: str, catalog: Iterable[Item]) -> Item | None:
        return self.selector.next_item(subject, catalog)

    def build_adaptive_feed(
        self,
        subject: str,
        catalog: Iterable[Item],
        count: int = DEFAULT_FEED_COUNT,
        completed_ids: Iterable[str] | None = None,
    ) -> list[Item]:
        return self.feed_builder.build_adaptive_feed(
            subject, catalog, count=count, completed_ids=completed_ids
        )

    def get_dashboard(self, catalog: Iterable[Item]) -> Dashboard:
        return self.reporter.get_dashboard(catalog)

    def reset_model(self) -> None:
        self.mastery.reset()

    # =========================================================================
    # Export / import
    # =========================================================================

    def export_model(self) -> dict[str, Any]:
        """JSON-ready copy of the current model."""
        return self.mastery.model.to_dict()

    def import_model(self, data: Any) -> LearnerModel:
        """
        Replace the current model with an exported document.

        Raises:
            ModelImportError: If the document is not a valid model
        """
        try:
            model = LearnerModel.from_dict(data)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise ModelImportError(f"Invalid learner model document: {e}") from e

        self.mastery.replace(model)
        logger.info(
            f"Imported learner model: {len(model.topics)} topics, "
            f"{len(model.items)} items, {len(model.history)} history entries"
        )
        return model

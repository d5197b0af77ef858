"""
Adaptive Practice Engine.

Components:
- ItemCatalog: Lessons and quizzes loaded from JSON
- MasteryEngine: ELO-style topic ratings and difficulty inference
- ItemSelector: Weighted topic draw + difficulty-gap scoring
- FeedBuilder: Ordered, de-duplicated session playlists
- DashboardReporter: Overall rating, strengths and weaknesses
- ModelRepository: Whole-blob persistence over a key-value store
- AdaptiveEngine: Main orchestration layer
"""
from satx.adaptive.catalog import Item, ItemCatalog
from satx.adaptive.dashboard import Dashboard, DashboardReporter, TopicReport, level_for
from satx.adaptive.engine import AdaptiveEngine
from satx.adaptive.feed import FeedBuilder
from satx.adaptive.mastery import EngineConfig, MasteryEngine, infer_difficulty
from satx.adaptive.models import (
    HistoryEntry,
    ItemState,
    LearnerModel,
    TopicKey,
    TopicState,
)
from satx.adaptive.selector import ItemSelector
from satx.adaptive.store import (
    KeyValueStore,
    MemoryKeyValueStore,
    ModelRepository,
    SqliteKeyValueStore,
)

__all__ = [
    # Main engine
    "AdaptiveEngine",
    # Component classes
    "MasteryEngine",
    "ItemSelector",
    "FeedBuilder",
    "DashboardReporter",
    "EngineConfig",
    "infer_difficulty",
    # Content
    "Item",
    "ItemCatalog",
    # Data models
    "TopicKey",
    "TopicState",
    "ItemState",
    "HistoryEntry",
    "LearnerModel",
    # Reporting
    "Dashboard",
    "TopicReport",
    "level_for",
    # Persistence
    "KeyValueStore",
    "MemoryKeyValueStore",
    "SqliteKeyValueStore",
    "ModelRepository",
]

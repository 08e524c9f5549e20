"""Living Score engine: decay, catalog, aggregation, medals.

Public API:
  fetch_place_signals  -- Living Score buckets + medals for a place
  get_top_signals      -- Highest-scoring signals across categories
  SignalService        -- Service bound to an explicit backend
  SignalCatalog        -- Load-once signal definition cache
  decayed_score        -- Linear decay of a single tap
"""

from livingscore.engine.aggregator import LivingScoreAggregator
from livingscore.engine.catalog import SignalCatalog, get_catalog
from livingscore.engine.decay import decayed_score
from livingscore.engine.models import Category, Medal, PlaceSignals, SignalAggregate
from livingscore.engine.service import SignalService, fetch_place_signals, get_top_signals

__all__ = [
    "Category",
    "LivingScoreAggregator",
    "Medal",
    "PlaceSignals",
    "SignalAggregate",
    "SignalCatalog",
    "SignalService",
    "decayed_score",
    "fetch_place_signals",
    "get_catalog",
    "get_top_signals",
]

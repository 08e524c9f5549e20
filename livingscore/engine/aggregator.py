"""Living Score aggregation -- tap events to sorted category buckets.

Pipeline (one place, recomputed on every call):
  1. Group taps by signal id: tap_total, current_score (sum of decayed
     scores), review_count, last_tap_at.
  2. Drop signals whose score decayed to zero and signals the catalog
     does not know.  Flag 0 < score < 1.0 as a ghost, round for display.
  3. Sort each category bucket by score, highest first.
  4. Award medals from the unrounded category totals.

Event signals use the same path with decay disabled: their score is
the raw intensity sum and they never earn medals.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timezone

from livingscore.config.defaults import GHOST_THRESHOLD, MAX_AGE_DAYS, SCORE_DECIMALS
from livingscore.config.schema import LivingScoreConfig, MedalsConfig
from livingscore.engine.catalog import SignalCatalog
from livingscore.engine.decay import decayed_score
from livingscore.engine.medals import award_medals, category_totals
from livingscore.engine.models import PlaceSignals, SignalAggregate, TapEvent

logger = logging.getLogger(__name__)


@dataclass
class _SignalGroup:
    """Running totals for one signal while folding taps."""
    tap_total: int = 0
    current_score: float = 0.0
    review_count: int = 0
    last_tap_at: datetime | None = None


class LivingScoreAggregator:
    """Aggregates raw tap events into Living Score buckets.

    Usage::

        agg = LivingScoreAggregator.from_config(config)
        result = agg.aggregate(taps, catalog)
        result.best_for[0].current_score

    Parameters:
        max_age_days: Decay window (default 180).
        ghost_threshold: Scores below this (and above 0) are ghosts
            (default 1.0).
        score_decimals: Rounding of the published score (default 2).
        medals: Medal thresholds.
    """

    def __init__(
        self,
        max_age_days: int = MAX_AGE_DAYS,
        ghost_threshold: float = GHOST_THRESHOLD,
        score_decimals: int = SCORE_DECIMALS,
        medals: MedalsConfig | None = None,
    ) -> None:
        self.max_age_days = max_age_days
        self.ghost_threshold = ghost_threshold
        self.score_decimals = score_decimals
        self.medals = medals or MedalsConfig()

    @classmethod
    def from_config(cls, config: LivingScoreConfig) -> LivingScoreAggregator:
        return cls(
            max_age_days=config.scoring.max_age_days,
            ghost_threshold=config.scoring.ghost_threshold,
            score_decimals=config.scoring.score_decimals,
            medals=config.medals,
        )

    def _group(
        self,
        taps: Iterable[TapEvent],
        now: datetime,
        decay: bool,
    ) -> dict[str, _SignalGroup]:
        """Step 1: fold taps into per-signal running totals."""
        groups: dict[str, _SignalGroup] = {}
        for tap in taps:
            group = groups.setdefault(tap.signal_id, _SignalGroup())
            group.tap_total += tap.intensity
            if decay:
                group.current_score += decayed_score(
                    tap.intensity, tap.created_at, now=now, max_age_days=self.max_age_days,
                )
            else:
                group.current_score += tap.intensity
            group.review_count += 1
            if group.last_tap_at is None or tap.created_at > group.last_tap_at:
                group.last_tap_at = tap.created_at
        return groups

    def is_ghost(self, score: float) -> bool:
        """A live signal that has faded below the ghost threshold."""
        return 0 < score < self.ghost_threshold

    def aggregate(
        self,
        taps: Iterable[TapEvent],
        catalog: SignalCatalog,
        now: datetime | None = None,
        decay: bool = True,
        with_medals: bool = True,
    ) -> PlaceSignals:
        """Compute category buckets and medals for one place's taps.

        Parameters:
            taps: Canonical tap events (see ``engine.taps`` adapters).
            catalog: Loaded signal catalog used for classification.
            now: Reference time for decay (default: current UTC time).
            decay: Apply time decay (False for event signals).
            with_medals: Derive medals from the category totals.

        Returns:
            PlaceSignals with each bucket sorted by score, descending.
        """
        now = now or datetime.now(timezone.utc)
        groups = self._group(taps, now, decay)

        result = PlaceSignals()
        scored = []
        scores_by_label: dict[str, float] = {}
        unknown = 0

        for signal_id, group in groups.items():
            # Dead signals do not exist for any consumer
            if group.current_score <= 0:
                continue
            definition = catalog.get_by_id(signal_id)
            if definition is None:
                unknown += 1
                continue

            scored.append((definition.category, group.current_score))
            scores_by_label[definition.label] = (
                scores_by_label.get(definition.label, 0.0) + group.current_score
            )

            result.bucket(definition.category).append(SignalAggregate(
                signal_id=signal_id,
                tap_total=group.tap_total,
                current_score=round(group.current_score, self.score_decimals),
                review_count=group.review_count,
                last_tap_at=group.last_tap_at,
                is_ghost=self.is_ghost(group.current_score),
                label=definition.label,
                icon=definition.icon,
                category=definition.category,
            ))

        if unknown:
            logger.debug("Dropped %d signal(s) unknown to the catalog", unknown)

        for bucket in (result.best_for, result.vibe, result.heads_up):
            bucket.sort(key=lambda s: s.current_score, reverse=True)

        if with_medals:
            result.medals = award_medals(category_totals(scored), scores_by_label, self.medals)
        return result


def top_signals(signals: PlaceSignals, limit: int) -> list[SignalAggregate]:
    """All buckets merged and re-sorted by score, truncated to ``limit``."""
    merged = sorted(signals.all_signals(), key=lambda s: s.current_score, reverse=True)
    return merged[:max(limit, 0)]

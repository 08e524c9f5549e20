"""Medal derivation from category score totals.

Medals are independent -- a place can earn none, any one, or all three:

  - vibe_check:  grand_total > 10 and positive share > 90%
  - speed_demon: "Fast Service" score > 5 and more than twice "Slow Service"
  - hidden_gem:  positive_total > 10, grand_total < 50, positive share > 95%

Totals are computed from unrounded Living Scores.  "Positive" counts both
best_for and vibe; heads_up is the negative side.  speed_demon matches
signals by display label, so renaming either label in the catalog
silently disables it.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TypedDict

from livingscore.config.schema import MedalsConfig
from livingscore.engine.models import Category, Medal


class CategoryTotals(TypedDict):
    """Summed unrounded Living Scores for one place."""
    positive_total: float   # best_for + vibe
    negative_total: float   # heads_up
    grand_total: float


def category_totals(scores: Iterable[tuple[Category, float]]) -> CategoryTotals:
    """Sum (category, score) pairs into positive / negative totals."""
    positive = 0.0
    negative = 0.0
    for category, score in scores:
        if category.is_positive:
            positive += score
        else:
            negative += score
    return CategoryTotals(
        positive_total=positive,
        negative_total=negative,
        grand_total=positive + negative,
    )


def _vibe_check(totals: CategoryTotals, config: MedalsConfig) -> bool:
    rule = config.vibe_check
    grand = totals["grand_total"]
    return (
        grand > rule.min_grand_total
        and totals["positive_total"] / grand > rule.min_positive_ratio
    )


def _speed_demon(scores_by_label: dict[str, float], config: MedalsConfig) -> bool:
    rule = config.speed_demon
    fast = scores_by_label.get(rule.fast_label, 0.0)
    slow = scores_by_label.get(rule.slow_label, 0.0)
    return fast > rule.min_fast_score and fast > rule.slow_multiplier * slow


def _hidden_gem(totals: CategoryTotals, config: MedalsConfig) -> bool:
    rule = config.hidden_gem
    grand = totals["grand_total"]
    return (
        totals["positive_total"] > rule.min_positive_total
        and grand < rule.max_grand_total
        and totals["positive_total"] / grand > rule.min_positive_ratio
    )


def award_medals(
    totals: CategoryTotals,
    scores_by_label: dict[str, float],
    config: MedalsConfig | None = None,
) -> list[Medal]:
    """Evaluate every medal rule.

    Parameters:
        totals: Category totals from ``category_totals``.
        scores_by_label: Unrounded Living Score per signal label.
        config: Medal thresholds (defaults when None).

    Returns:
        Awarded medals in declaration order.  Empty when
        ``grand_total`` is zero.
    """
    config = config or MedalsConfig()
    if totals["grand_total"] <= 0:
        return []

    medals: list[Medal] = []
    if _vibe_check(totals, config):
        medals.append(Medal.VIBE_CHECK)
    if _speed_demon(scores_by_label, config):
        medals.append(Medal.SPEED_DEMON)
    if _hidden_gem(totals, config):
        medals.append(Medal.HIDDEN_GEM)
    return medals

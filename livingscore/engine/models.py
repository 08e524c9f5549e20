"""Core types for the Living Score engine.

  - ``Category`` enum: the three fixed signal buckets
  - ``SignalDefinition``: static catalog metadata for one signal
  - ``TapEvent``: canonical tap shape seen by the aggregation core
  - ``SignalAggregate``: per-(place, signal) derived Living Score
  - ``Medal`` enum and ``PlaceSignals`` result container
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from livingscore.config.defaults import CATEGORY_ALIASES

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class Category(Enum):
    """Signal category. Every signal belongs to exactly one."""
    BEST_FOR = "best_for"   # positive: "The Good"
    VIBE = "vibe"           # neutral: "The Vibe"
    HEADS_UP = "heads_up"   # negative: "Heads Up"

    @classmethod
    def parse(cls, value: Any) -> Category | None:
        """Map a backend category string to a Category.

        Accepts the wire values and the positive/neutral/negative aliases.
        Anything else (``other``, ``pro_endorsement``, None) returns None.
        """
        if isinstance(value, Category):
            return value
        if not isinstance(value, str):
            return None
        canonical = CATEGORY_ALIASES.get(value.strip().lower())
        return cls(canonical) if canonical else None

    @property
    def is_positive(self) -> bool:
        """best_for and vibe both count toward the positive total."""
        return self is not Category.HEADS_UP


class Medal(Enum):
    """Badges derived from a place's category score ratios."""
    VIBE_CHECK = "vibe_check"
    SPEED_DEMON = "speed_demon"
    HIDDEN_GEM = "hidden_gem"


# ---------------------------------------------------------------------------
# Catalog / input types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SignalDefinition:
    """Static metadata for one tappable signal."""
    id: str
    slug: str
    label: str
    icon: str
    category: Category
    color: str = ""
    prefix: str = ""
    display_order: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "slug": self.slug,
            "label": self.label,
            "icon": self.icon,
            "category": self.category.value,
            "color": self.color,
            "prefix": self.prefix,
            "display_order": self.display_order,
        }


@dataclass(frozen=True)
class TapEvent:
    """One reviewer's application of a signal within one review.

    ``created_at`` is the parent review's timestamp (timezone-aware UTC).
    """
    signal_id: str
    intensity: int
    created_at: datetime


# ---------------------------------------------------------------------------
# Derived types
# ---------------------------------------------------------------------------

@dataclass
class SignalAggregate:
    """Living Score for one signal on one place, recomputed per request."""
    signal_id: str
    tap_total: int
    current_score: float
    review_count: int
    last_tap_at: datetime | None
    is_ghost: bool
    label: str
    icon: str
    category: Category

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON consumers."""
        return {
            "signal_id": self.signal_id,
            "tap_total": self.tap_total,
            "current_score": self.current_score,
            "review_count": self.review_count,
            "last_tap_at": self.last_tap_at.isoformat() if self.last_tap_at else None,
            "is_ghost": self.is_ghost,
            "label": self.label,
            "icon": self.icon,
            "category": self.category.value,
        }


@dataclass
class PlaceSignals:
    """Category buckets plus medals for one place.

    Each bucket is sorted by ``current_score`` descending.
    """
    best_for: list[SignalAggregate] = field(default_factory=list)
    vibe: list[SignalAggregate] = field(default_factory=list)
    heads_up: list[SignalAggregate] = field(default_factory=list)
    medals: list[Medal] = field(default_factory=list)

    @classmethod
    def empty(cls) -> PlaceSignals:
        return cls()

    # positive / neutral / negative naming
    @property
    def positive(self) -> list[SignalAggregate]:
        return self.best_for

    @property
    def neutral(self) -> list[SignalAggregate]:
        return self.vibe

    @property
    def negative(self) -> list[SignalAggregate]:
        return self.heads_up

    def bucket(self, category: Category) -> list[SignalAggregate]:
        """Return the (mutable) bucket list for a category."""
        return getattr(self, category.value)

    def all_signals(self) -> list[SignalAggregate]:
        """Every aggregate across the three buckets, in bucket order."""
        return [*self.best_for, *self.vibe, *self.heads_up]

    def is_empty(self) -> bool:
        return not (self.best_for or self.vibe or self.heads_up)

    def to_dict(self) -> dict[str, Any]:
        """Serialize with category wire values as keys."""
        return {
            "best_for": [s.to_dict() for s in self.best_for],
            "vibe": [s.to_dict() for s in self.vibe],
            "heads_up": [s.to_dict() for s in self.heads_up],
            "medals": [m.value for m in self.medals],
        }

    def __repr__(self) -> str:
        return (
            f"PlaceSignals(best_for={len(self.best_for)}, vibe={len(self.vibe)}, "
            f"heads_up={len(self.heads_up)}, medals={[m.value for m in self.medals]})"
        )

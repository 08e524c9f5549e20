"""Default values for the Living Score engine.

Decay window, ghost threshold and medal thresholds match the values the
place page has always shipped with.  Changing them changes what users see
on every place, so treat edits here as product changes.
"""

# ---------------------------------------------------------------------------
# Decay
# ---------------------------------------------------------------------------
MAX_AGE_DAYS = 180          # A tap this old (or older) contributes nothing
GHOST_THRESHOLD = 1.0       # 0 < score < 1.0 renders as a fading "ghost"
SCORE_DECIMALS = 2          # Published current_score precision

# ---------------------------------------------------------------------------
# Tap intensity
# ---------------------------------------------------------------------------
MIN_INTENSITY = 1
MAX_INTENSITY = 3           # Repeated taps on one signal within one review
LEGACY_INTENSITY = 1        # Legacy rows carry no intensity

# ---------------------------------------------------------------------------
# Display / windows
# ---------------------------------------------------------------------------
TOP_SIGNALS_LIMIT = 3
THERMOMETER_MONTHS = 3
DAYS_PER_MONTH = 30

# ---------------------------------------------------------------------------
# Medals
# ---------------------------------------------------------------------------
MEDAL_THRESHOLDS = {
    "vibe_check": {
        "min_grand_total": 10.0,        # grand_total > 10
        "min_positive_ratio": 0.90,     # positive / grand > 0.9
    },
    "speed_demon": {
        "fast_label": "Fast Service",
        "slow_label": "Slow Service",
        "min_fast_score": 5.0,          # fast > 5
        "slow_multiplier": 2.0,         # fast > 2 x slow
    },
    "hidden_gem": {
        "min_positive_total": 10.0,     # positive > 10
        "max_grand_total": 50.0,        # grand < 50
        "min_positive_ratio": 0.95,     # positive / grand > 0.95
    },
}

# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------
CATEGORY_COLORS = {
    "best_for": "#0A84FF",  # Blue - The Good
    "vibe": "#8B5CF6",      # Purple - The Vibe
    "heads_up": "#FF9500",  # Orange - Heads Up
}

CATEGORY_TITLES = {
    "best_for": "The Good",
    "vibe": "The Vibe",
    "heads_up": "Heads Up",
}

# Accepted spellings of each category in backend rows
CATEGORY_ALIASES = {
    "best_for": "best_for",
    "positive": "best_for",
    "vibe": "vibe",
    "neutral": "vibe",
    "heads_up": "heads_up",
    "negative": "heads_up",
}

# ---------------------------------------------------------------------------
# Signal prefixes (which signal set a place type reviews with)
# ---------------------------------------------------------------------------
CATEGORY_PREFIX_MAP = {
    "restaurant": "r_",
    "bar": "b_",
    "cafe": "c_",
    "hotel": "h_",
    "entertainment": "tp_",
    "attraction": "tp_",
    "retail": "rt_",
    "fitness": "f_",
    "beauty": "bt_",
    "health": "hc_",
    "services": "sv_",
    "automotive": "au_",
    "education": "ed_",
    "financial": "fn_",
    "government": "gv_",
    "religious": "rg_",
    "transportation": "tr_",
    "utilities": "ut_",
    "default": "g_",
}

SUBCATEGORY_PREFIX_OVERRIDES = {
    "theme_park_ride": "tp_",
    "theme_park_attraction": "tp_",
    "theme_park_food": "tp_",
    "theme_park_restroom": "tp_",
    "show": "tp_",
    "dark_ride": "tp_",
    "roller_coaster": "tp_",
    "water_ride": "tp_",
    "boat_ride": "tp_",
    "carousel": "tp_",
    "train": "tp_",
    "spinner": "tp_",
    "simulator": "tp_",
    "meet_greet": "tp_",
    "playground": "tp_",
    "thrill_ride": "tp_",
    "flat_ride": "tp_",
}

EVENT_SLUG_PREFIX = "event_"

# ---------------------------------------------------------------------------
# Backend
# ---------------------------------------------------------------------------
BACKEND_TABLES = {
    "signal_definitions": "review_items",
    "place_taps": "place_review_signal_taps",
    "place_reviews": "place_reviews",
    "legacy_place_signals": "place_signals",
    "event_taps": "event_review_signal_taps",
    "event_reviews": "event_reviews",
}

REST_DEFAULTS = {
    "url": "",
    "timeout": 10.0,
}

DATABASE_DEFAULTS = {
    "path": "~/.livingscore/livingscore.db",
}

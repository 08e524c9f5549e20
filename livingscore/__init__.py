"""Living Score -- time-decayed community signal scoring for places."""

__version__ = "0.1.0"

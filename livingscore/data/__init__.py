"""Backend collaborators: the SignalSource protocol and its adapters."""

from livingscore.data.source import SignalSource, build_source

__all__ = ["SignalSource", "build_source"]

"""Concrete SignalSource implementations."""

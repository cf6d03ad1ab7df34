"""Store feature entities."""

from .protocols import Clock, KeyValueStore

__all__ = [
    "Clock",
    "KeyValueStore",
]

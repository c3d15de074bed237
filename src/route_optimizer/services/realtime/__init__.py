"""Real-time push channel."""

from .delays import DelayBoard, delay_board
from .hub import ConnectionHub, hub
from .notifier import RouteUpdateNotifier, notifier

__all__ = [
    "DelayBoard",
    "delay_board",
    "ConnectionHub",
    "hub",
    "RouteUpdateNotifier",
    "notifier",
]

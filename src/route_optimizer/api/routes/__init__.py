"""Route group exports."""

from . import health, network, optimization, realtime, trips

__all__ = ["health", "network", "trips", "optimization", "realtime"]

"""Transit network access."""

from .repository import clear_network_cache, get_network, load_network_from_file
from .store import InMemoryTransitNetwork, TransitNetworkStore

__all__ = [
    "TransitNetworkStore",
    "InMemoryTransitNetwork",
    "get_network",
    "load_network_from_file",
    "clear_network_cache",
]

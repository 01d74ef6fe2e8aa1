"""Route discovery and selection.

Module structure:
- discovery.py: RouteDiscoverer enumerating hub-token routes
- selector.py: BestRouteSelector with optional gas-aware re-ranking
"""

from uniroute.routing.discovery import DiscoveredRoutes, PairSet, RouteDiscoverer
from uniroute.routing.selector import BestRouteSelector, pick_per_hop_bucket

__all__ = [
    "BestRouteSelector",
    "DiscoveredRoutes",
    "PairSet",
    "RouteDiscoverer",
    "pick_per_hop_bucket",
]

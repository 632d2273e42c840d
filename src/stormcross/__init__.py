#!/usr/bin/env python3
"""
Stormcross - checks shipping routes against tropical cyclone hazards.

This package unwraps routes across the antimeridian and reports the first
point where a route crosses a forecast cone polygon or a storm track line.
"""
import importlib.metadata

__version__ = importlib.metadata.version("stormcross")

# Import main classes for public API
from .geometry import ParseError, Position
from .geometry_utils import centroid, normalize_longitudes
from .hazard import (
    HazardCopy,
    HazardFeatureSet,
    HazardKind,
    Intersection,
    find_first_intersection,
    find_route_intersection,
)
from .monitor import RouteHazardMonitor
from .route import Route, RoutePoint

normalize = normalize_longitudes

__all__ = [
    "ParseError",
    "Position",
    "Route",
    "RoutePoint",
    "HazardCopy",
    "HazardFeatureSet",
    "HazardKind",
    "Intersection",
    "RouteHazardMonitor",
    "normalize",
    "centroid",
    "find_first_intersection",
    "find_route_intersection",
]

"""
Coordinate types and conversions for route and hazard geometry.

This module provides the Position type used throughout the package, strict
parsing of coordinate input (strings from route records, GeoJSON arrays
from hazard layers), conversion to Shapely LineString objects, and geodesic
distances on the WGS84 ellipsoid.
"""

import math
import logging
from typing import Any, List, NamedTuple, Sequence

import pyproj
from shapely.geometry import LineString

logger = logging.getLogger(__name__)

METERS_PER_NAUTICAL_MILE = 1852.0

_GEOD = pyproj.Geod(ellps="WGS84")


class ParseError(ValueError):
    """Raised when coordinate input cannot be read as a finite number."""


class Position(NamedTuple):
    """Represents a geographic position with latitude and longitude."""

    latitude: float
    longitude: float


def parse_coordinate(value: Any, name: str = "coordinate") -> float:
    """
    Parse a single latitude or longitude value into a float.

    Args:
        value: Number or numeric string
        name: Field name used in error messages

    Returns:
        The value as a finite float

    Raises:
        ParseError: If the value is missing, non-numeric, NaN or infinite
    """
    # bool is an int subclass; True is not a latitude
    if value is None or isinstance(value, bool):
        raise ParseError(f"Invalid {name}: {value!r}")

    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise ParseError(f"Invalid {name}: empty string")
        try:
            number = float(text)
        except ValueError:
            raise ParseError(f"Invalid {name}: {value!r} is not a number")
    elif isinstance(value, (int, float)):
        number = float(value)
    else:
        raise ParseError(f"Invalid {name}: unsupported type {type(value).__name__}")

    if not math.isfinite(number):
        raise ParseError(f"Invalid {name}: {value!r} is not finite")

    return number


def parse_position(latitude: Any, longitude: Any) -> Position:
    """Parse a (latitude, longitude) pair into a Position."""
    return Position(
        latitude=parse_coordinate(latitude, "latitude"),
        longitude=parse_coordinate(longitude, "longitude"),
    )


def position_from_geojson(coord: Sequence[Any]) -> Position:
    """
    Convert a GeoJSON position into a Position.

    GeoJSON stores positions as [longitude, latitude] with an optional
    altitude; the altitude is ignored.

    Raises:
        ParseError: If the position has fewer than two values or they are invalid
    """
    if isinstance(coord, (str, bytes)) or not isinstance(coord, Sequence):
        raise ParseError(f"Invalid GeoJSON position: {coord!r}")
    if len(coord) < 2:
        raise ParseError(f"GeoJSON position needs two values, got {len(coord)}")
    return parse_position(latitude=coord[1], longitude=coord[0])


def coords_to_polyline(positions: Sequence[Position]) -> LineString:
    """
    Convert a list of positions to a Shapely LineString.

    The LineString is built in (longitude, latitude) axis order so that its
    bounds read as (west, south, east, north).

    Raises:
        ValueError: If positions is empty or has less than 2 points
    """
    if not positions or len(positions) < 2:
        raise ValueError("At least two positions are required to create a LineString.")

    return LineString([(pos.longitude, pos.latitude) for pos in positions])


def geodesic_distance_nm(coord1: Position, coord2: Position) -> float:
    """
    Calculate the WGS84 geodesic distance between two positions.

    Args:
        coord1: First coordinate position
        coord2: Second coordinate position

    Returns:
        Distance in nautical miles
    """
    _, _, meters = _GEOD.inv(
        coord1.longitude, coord1.latitude, coord2.longitude, coord2.latitude
    )
    return meters / METERS_PER_NAUTICAL_MILE


def positions_from_geojson(coords: Sequence[Sequence[Any]]) -> List[Position]:
    """Convert a GeoJSON coordinate array into a list of Positions."""
    if isinstance(coords, (str, bytes)) or not isinstance(coords, Sequence):
        raise ParseError(f"Invalid GeoJSON coordinate array: {coords!r}")
    return [position_from_geojson(coord) for coord in coords]

#!/usr/bin/env python3
"""
Route data model for hazard intersection checks.
"""

from typing import Any, Iterator, List, Mapping, NamedTuple, Optional, Sequence, TextIO, Tuple
import json
import logging
import gpxpy
import gpxpy.gpx
from shapely.geometry import LineString

from .geometry import (
    ParseError,
    Position,
    coords_to_polyline,
    geodesic_distance_nm,
    parse_coordinate,
    parse_position,
)
from .geometry_utils import centroid, normalize_longitudes

logger = logging.getLogger(__name__)


class RoutePoint(NamedTuple):
    """A route position with the metadata carried alongside it."""

    position: Position
    origin: Optional[str] = None
    destination: Optional[str] = None
    cumulative_distance: Optional[float] = None


class Route:
    """Represents a shipping route with memoized geometric operations."""

    def __init__(self, points: Sequence[RoutePoint]):
        """Initializes a Route object.

        Args:
            points: Route points in travel order.

        Raises:
            ValueError: If points is empty.
        """
        if not points:
            raise ValueError("Route points cannot be empty")

        self.points: List[RoutePoint] = list(points)
        self.coords: List[Position] = [point.position for point in self.points]
        self._normalized: Optional[List[Position]] = None
        self._linestring: Optional[LineString] = None

    @classmethod
    def from_positions(cls, positions: Sequence[Position]) -> "Route":
        return cls([RoutePoint(position) for position in positions])

    @classmethod
    def from_records(cls, records: Sequence[Mapping[str, Any]]) -> "Route":
        """
        Build a route from records with latitude and longitude fields.

        Latitude and longitude may be numbers or numeric strings. The optional
        fields origin, destination and cumulative_dist are kept as metadata.

        Raises:
            ParseError: If a record is not a mapping or its coordinates are invalid
            ValueError: If records is empty
        """
        if not records:
            raise ValueError("Route records cannot be empty")

        points = []
        for i, record in enumerate(records):
            if not isinstance(record, Mapping):
                raise ParseError(f"Route record {i} is not an object: {record!r}")
            try:
                position = parse_position(record.get("latitude"), record.get("longitude"))
                distance = record.get("cumulative_dist")
                if distance is not None:
                    distance = parse_coordinate(distance, "cumulative_dist")
            except ParseError as e:
                raise ParseError(f"Route record {i}: {e}") from e

            origin = record.get("origin")
            destination = record.get("destination")
            points.append(
                RoutePoint(
                    position=position,
                    origin=str(origin) if origin is not None else None,
                    destination=str(destination) if destination is not None else None,
                    cumulative_distance=distance,
                )
            )

        route = cls(points)
        logger.debug(f"Parsed {len(route)} route points from records")
        return route

    @classmethod
    def from_gpx(cls, file_input: TextIO) -> "Route":
        """
        Parse a GPX file into a route.

        Route points are used when the file has routes; otherwise all track
        points of all tracks and segments are concatenated.

        Raises:
            gpxpy.gpx.GPXException: If GPX file is malformed.
            ValueError: If the file has no points.
        """
        gpx_data = gpxpy.parse(file_input)

        coords_data = []
        for gpx_route in gpx_data.routes:
            for point in gpx_route.points:
                coords_data.append(Position(point.latitude, point.longitude))

        if not coords_data:
            for track in gpx_data.tracks:
                for segment in track.segments:
                    for point in segment.points:
                        coords_data.append(Position(point.latitude, point.longitude))

        route = cls.from_positions(coords_data)
        logger.debug(f"Parsed {len(route)} points from GPX file")
        return route

    @classmethod
    def from_file(cls, filename: str) -> "Route":
        """
        Load a route from a GPX or JSON file.

        JSON input is either a list of route records or an object holding
        the list under "route".

        Raises:
            FileNotFoundError: If the file does not exist.
            gpxpy.gpx.GPXException: If a GPX file is malformed.
            json.JSONDecodeError: If a JSON file is malformed.
            ParseError: If the records are invalid.
        """
        with open(filename, "r", encoding="utf-8") as f:
            if filename.lower().endswith(".gpx"):
                return cls.from_gpx(f)
            data = json.load(f)

        if isinstance(data, dict):
            data = data.get("route")
        if not isinstance(data, list):
            raise ParseError(f"{filename}: expected a list of route records")
        return cls.from_records(data)

    @property
    def normalized_coords(self) -> List[Position]:
        """Route positions unwrapped across the antimeridian."""
        if self._normalized is None:
            self._normalized = normalize_longitudes(self.coords)
        return self._normalized

    @property
    def center(self) -> Position:
        """Mean position of the normalized route."""
        return centroid(self.normalized_coords)

    @property
    def origin(self) -> Optional[str]:
        return next((p.origin for p in self.points if p.origin), None)

    @property
    def destination(self) -> Optional[str]:
        return next((p.destination for p in reversed(self.points) if p.destination), None)

    @property
    def linestring(self) -> Optional[LineString]:
        """Shapely line of the normalized route, or None under two points."""
        if self._linestring is None and len(self.coords) >= 2:
            self._linestring = coords_to_polyline(self.normalized_coords)
        return self._linestring

    def get_bbox(self) -> Tuple[float, float, float, float]:
        """
        Bounding box of the normalized route.

        Returns:
            Tuple of (south, west, north, east) in decimal degrees; west and
            east may lie outside [-180, 180]
        """
        latitudes = [p.latitude for p in self.normalized_coords]
        longitudes = [p.longitude for p in self.normalized_coords]
        return (min(latitudes), min(longitudes), max(latitudes), max(longitudes))

    def cumulative_distances(self) -> List[float]:
        """
        Cumulative distance along the route in nautical miles.

        Supplied cumulative_dist values are kept; missing ones are filled in
        from the previous value plus the WGS84 geodesic leg distance.
        """
        distances: List[float] = []
        for i, point in enumerate(self.points):
            if point.cumulative_distance is not None:
                distances.append(point.cumulative_distance)
            elif i == 0:
                distances.append(0.0)
            else:
                leg = geodesic_distance_nm(self.coords[i - 1], self.coords[i])
                distances.append(distances[-1] + leg)
        return distances

    def focus_point(self, intersection: Optional[Position] = None) -> Position:
        """Where a map should center: the intersection if any, else the route center."""
        if intersection is not None:
            return intersection
        return self.center

    def __len__(self) -> int:
        return len(self.points)

    def __getitem__(self, index):
        return self.coords[index]

    def __iter__(self) -> Iterator[Position]:
        return iter(self.coords)

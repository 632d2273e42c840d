#!/usr/bin/env python3
"""
Hazard geometry and the multi-copy intersection scan.

Hazard layers arrive as GeoJSON feature collections in (longitude, latitude)
order. Each layer is probed in three copies, shifted by 0, -360 and +360
degrees of longitude, so that a route unwrapped past the antimeridian still
meets geometry authored in [-180, 180].
"""

import copy
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import (
    Any,
    Callable,
    Dict,
    Iterator,
    List,
    NamedTuple,
    Optional,
    Sequence,
    Tuple,
)

from .geometry import ParseError, Position, position_from_geojson, positions_from_geojson
from .geometry_utils import (
    DETERMINANT_EPSILON,
    line_intersects_line,
    line_intersects_polygon,
)

logger = logging.getLogger(__name__)

Feature = Dict[str, Any]
BBox = Tuple[float, float, float, float]


class HazardKind(Enum):
    POLYGON = "polygon"  # forecast cone
    LINE = "line"  # observed or forecast track


class HazardCopy(Enum):
    ORIGINAL = "original"
    MINUS_360 = "minus360"
    PLUS_360 = "plus360"

    @property
    def offset(self) -> float:
        """Longitude offset of this copy in degrees."""
        return {
            HazardCopy.ORIGINAL: 0.0,
            HazardCopy.MINUS_360: -360.0,
            HazardCopy.PLUS_360: 360.0,
        }[self]


# Copies are always probed in this order
COPY_ORDER = (HazardCopy.ORIGINAL, HazardCopy.MINUS_360, HazardCopy.PLUS_360)

_GEOMETRY_TYPES = {
    HazardKind.POLYGON: ("Polygon", "MultiPolygon"),
    HazardKind.LINE: ("LineString", "MultiLineString"),
}


class Intersection(NamedTuple):
    """First crossing between a route and a hazard layer."""

    position: Position
    kind: HazardKind
    copy: HazardCopy
    feature_index: int


def _is_position(coords: Any) -> bool:
    return bool(coords) and not isinstance(coords[0], (list, tuple))


def _shift_coordinates(coords: Any, offset: float) -> List[Any]:
    """
    Return a nested GeoJSON coordinate array with offset added to every longitude.

    Positions may be lists or tuples of numbers or numeric strings; each is
    parsed and written back as a [longitude, latitude, ...] list of floats.

    Raises:
        ParseError: If a position or coordinate array is malformed
    """
    if isinstance(coords, (str, bytes)) or not isinstance(coords, (list, tuple)):
        raise ParseError(f"Invalid GeoJSON coordinate array: {coords!r}")
    if _is_position(coords):
        position = position_from_geojson(coords)
        return [position.longitude + offset, position.latitude, *coords[2:]]
    return [_shift_coordinates(item, offset) for item in coords]


def _shift_geometry(geometry: Optional[Dict[str, Any]], offset: float) -> None:
    if not geometry:
        return
    if not isinstance(geometry, dict):
        raise ParseError(f"Invalid GeoJSON geometry: {geometry!r}")
    if geometry.get("type") == "GeometryCollection":
        for member in geometry.get("geometries", []):
            _shift_geometry(member, offset)
    elif geometry.get("coordinates") is not None:
        geometry["coordinates"] = _shift_coordinates(geometry["coordinates"], offset)


def shift_feature_collection(collection: Dict[str, Any], offset: float) -> Dict[str, Any]:
    """
    Return a deep copy of a FeatureCollection with every longitude shifted.

    Args:
        collection: GeoJSON FeatureCollection (not modified)
        offset: Degrees added to each longitude

    Returns:
        The shifted copy, with coordinates parsed to floats

    Raises:
        ParseError: If a feature or its coordinates are malformed
    """
    shifted = copy.deepcopy(collection)
    for feature in shifted.get("features") or []:
        if not isinstance(feature, dict):
            raise ParseError(f"Invalid GeoJSON feature: {feature!r}")
        _shift_geometry(feature.get("geometry"), offset)
    return shifted


def _features_of(collection: Any) -> List[Feature]:
    if collection is None:
        return []
    if isinstance(collection, list):
        return list(collection)
    if not isinstance(collection, dict):
        raise ParseError(
            f"Expected a GeoJSON FeatureCollection, got {type(collection).__name__}"
        )
    if collection.get("type") == "Feature":
        return [collection]
    return list(collection.get("features") or [])


@dataclass
class HazardFeatureSet:
    """Three longitude-shifted copies of the same hazard features."""

    original: List[Feature] = field(default_factory=list)
    minus360: List[Feature] = field(default_factory=list)
    plus360: List[Feature] = field(default_factory=list)

    @classmethod
    def from_collection(cls, collection: Dict[str, Any]) -> "HazardFeatureSet":
        """Derive the shifted copies from a single FeatureCollection."""
        features = _features_of(collection)
        logger.debug(f"Deriving shifted copies for {len(features)} hazard features")
        wrapped = {"type": "FeatureCollection", "features": features}
        return cls(
            original=_features_of(shift_feature_collection(wrapped, 0.0)),
            minus360=_features_of(shift_feature_collection(wrapped, -360.0)),
            plus360=_features_of(shift_feature_collection(wrapped, 360.0)),
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HazardFeatureSet":
        """
        Read the pre-shifted shape {"original": ..., "minus360": ..., "plus360": ...}.

        Each entry is a FeatureCollection or a list of features. Missing copies
        are treated as empty.
        """
        if not isinstance(data, dict):
            raise ParseError(
                f"Expected an object with hazard copies, got {type(data).__name__}"
            )
        return cls(
            original=_features_of(data.get(HazardCopy.ORIGINAL.value)),
            minus360=_features_of(data.get(HazardCopy.MINUS_360.value)),
            plus360=_features_of(data.get(HazardCopy.PLUS_360.value)),
        )

    def features(self, which: HazardCopy) -> List[Feature]:
        return {
            HazardCopy.ORIGINAL: self.original,
            HazardCopy.MINUS_360: self.minus360,
            HazardCopy.PLUS_360: self.plus360,
        }[which]

    def copies(self) -> Iterator[Tuple[HazardCopy, List[Feature]]]:
        """Yield (copy, features) in the fixed probe order."""
        for which in COPY_ORDER:
            yield which, self.features(which)

    def __len__(self) -> int:
        return len(self.original)


def coerce_hazard(data: Any) -> Optional[HazardFeatureSet]:
    """
    Accept a HazardFeatureSet, the pre-shifted dict shape or a plain
    FeatureCollection.
    """
    if data is None or isinstance(data, HazardFeatureSet):
        return data
    if isinstance(data, dict) and any(
        which.value in data for which in COPY_ORDER
    ):
        return HazardFeatureSet.from_dict(data)
    return HazardFeatureSet.from_collection(data)


def feature_parts(feature: Feature, kind: HazardKind) -> List[Any]:
    """
    Extract the geometry parts of a feature in (lat, lon) order.

    For POLYGON each part is a list of rings; for LINE each part is a list of
    positions. Features without geometry, or with a geometry type that does
    not match kind, contribute nothing.

    Raises:
        ParseError: If the coordinates are malformed
    """
    if not isinstance(feature, dict):
        raise ParseError(f"Invalid GeoJSON feature: {feature!r}")
    geometry = feature.get("geometry")
    if not geometry:
        return []
    if not isinstance(geometry, dict):
        raise ParseError(f"Invalid GeoJSON geometry: {geometry!r}")

    single, multi = _GEOMETRY_TYPES[kind]
    geometry_type = geometry.get("type", single)
    coords = geometry.get("coordinates")
    if coords is None:
        return []

    if geometry_type not in (single, multi):
        logger.debug(f"Skipping {geometry_type} geometry while scanning {kind.value}s")
        return []

    if isinstance(coords, (str, bytes)) or not isinstance(coords, (list, tuple)):
        raise ParseError(f"Invalid {geometry_type} coordinates: {coords!r}")

    members = coords if geometry_type == multi else [coords]
    if kind == HazardKind.POLYGON:
        parts = []
        for polygon in members:
            if isinstance(polygon, (str, bytes)) or not isinstance(polygon, (list, tuple)):
                raise ParseError(f"Invalid {geometry_type} coordinates: {polygon!r}")
            parts.append([positions_from_geojson(ring) for ring in polygon])
        return parts
    return [positions_from_geojson(line) for line in members]


def _bbox(points: Sequence[Position]) -> Optional[BBox]:
    if not points:
        return None
    latitudes = [p.latitude for p in points]
    longitudes = [p.longitude for p in points]
    return (min(latitudes), min(longitudes), max(latitudes), max(longitudes))


def _bboxes_overlap(a: Optional[BBox], b: Optional[BBox]) -> bool:
    if a is None or b is None:
        return False
    return not (a[2] < b[0] or b[2] < a[0] or a[3] < b[1] or b[3] < a[1])


def scan_hazard(
    route: Sequence[Position],
    hazard: HazardFeatureSet,
    kind: HazardKind,
    epsilon: float = DETERMINANT_EPSILON,
) -> Iterator[Intersection]:
    """
    Lazily yield route crossings with a hazard layer.

    Copies are visited in the fixed order original, minus360, plus360, and
    features in their given order. A feature yields at most one crossing.
    Parts whose bounding box misses the route's are skipped.

    Args:
        route: Normalized route positions
        hazard: The three copies of the hazard features
        kind: Whether the features are polygons or lines
        epsilon: Relative tolerance passed to segments_intersect
    """
    if len(route) < 2:
        return

    route_bbox = _bbox(route)
    for which, features in hazard.copies():
        for index, feature in enumerate(features):
            for part in feature_parts(feature, kind):
                if kind == HazardKind.POLYGON:
                    outline = [point for ring in part for point in ring]
                    if not _bboxes_overlap(route_bbox, _bbox(outline)):
                        continue
                    hit = line_intersects_polygon(route, part, epsilon)
                else:
                    if not _bboxes_overlap(route_bbox, _bbox(part)):
                        continue
                    hit = line_intersects_line(route, part, epsilon)

                if hit is not None:
                    logger.debug(
                        f"Route crosses {kind.value} feature {index} "
                        f"in {which.value} copy at "
                        f"({hit.latitude:.4f}, {hit.longitude:.4f})"
                    )
                    yield Intersection(hit, kind, which, index)
                    break


def find_first_intersection(
    route: Sequence[Position],
    hazard: HazardFeatureSet,
    mode: HazardKind,
    epsilon: float = DETERMINANT_EPSILON,
) -> Optional[Position]:
    """Return the first crossing of the route with any copy of the hazard."""
    for intersection in scan_hazard(route, hazard, mode, epsilon):
        return intersection.position
    return None


def find_route_intersection(
    route: Sequence[Position],
    forecast_cone: Optional[HazardFeatureSet] = None,
    observed_track: Optional[HazardFeatureSet] = None,
    on_intersection: Optional[Callable[[Intersection], None]] = None,
    epsilon: float = DETERMINANT_EPSILON,
) -> Optional[Intersection]:
    """
    Check a normalized route against the forecast cone, then the track.

    Cone polygons take precedence: the track is scanned only when no cone
    polygon is crossed.

    Args:
        route: Normalized route positions
        forecast_cone: Cone polygons, if loaded
        observed_track: Track lines, if loaded
        on_intersection: Called with the intersection when one is found
        epsilon: Relative tolerance passed to segments_intersect

    Returns:
        The first intersection, or None
    """
    intersection: Optional[Intersection] = None

    layers = (
        (forecast_cone, HazardKind.POLYGON),
        (observed_track, HazardKind.LINE),
    )
    for hazard, kind in layers:
        if hazard is None:
            continue
        intersection = next(scan_hazard(route, hazard, kind, epsilon), None)
        if intersection is not None:
            break

    if intersection is None:
        logger.info("No intersection found.")
        return None

    logger.info(
        f"Route intersects {intersection.kind.value} hazard at "
        f"({intersection.position.latitude:.4f}, {intersection.position.longitude:.4f})"
    )
    if on_intersection is not None:
        on_intersection(intersection)
    return intersection

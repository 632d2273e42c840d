#!/usr/bin/env python3
"""
Planar intersection math for routes and hazard geometry.

Latitude and longitude are treated as planar (x, y) values. Routes are
unwrapped across the antimeridian first so that straight segments between
consecutive points never jump across the map.
"""

from typing import List, Optional, Sequence
import logging

from .geometry import Position

logger = logging.getLogger(__name__)

# Relative tolerance on the cross product of two segment directions,
# i.e. the sine of the smallest angle treated as non-parallel.
DETERMINANT_EPSILON = 1e-9


def normalize_longitudes(points: Sequence[Position]) -> List[Position]:
    """
    Unwrap longitudes so consecutive points never differ by more than 180°.

    The first point is kept as is. Every later point is compared with the
    previous adjusted point and shifted by multiples of 360° until the jump
    is at most 180°. Longitudes may end up outside [-180, 180].

    Args:
        points: Route positions in travel order

    Returns:
        New list of positions with the same length and order
    """
    if len(points) < 2:
        return list(points)

    adjusted = [points[0]]
    for point in points[1:]:
        prev_lon = adjusted[-1].longitude
        lon = point.longitude
        while abs(lon - prev_lon) > 180.0:
            lon = lon - 360.0 if lon > prev_lon else lon + 360.0
        if lon != point.longitude:
            logger.debug(
                f"Unwrapped longitude {point.longitude:.4f} to {lon:.4f} "
                f"(previous {prev_lon:.4f})"
            )
            point = Position(latitude=point.latitude, longitude=lon)
        adjusted.append(point)

    return adjusted


def count_antimeridian_crossings(points: Sequence[Position]) -> int:
    """Count consecutive raw points whose longitude jump exceeds 180°."""
    return sum(
        1
        for prev, curr in zip(points, points[1:])
        if abs(curr.longitude - prev.longitude) > 180.0
    )


def centroid(points: Sequence[Position]) -> Position:
    """
    Arithmetic mean of all latitudes and all longitudes.

    Raises:
        ValueError: If points is empty
    """
    if not points:
        raise ValueError("Cannot compute the centroid of an empty sequence")

    total = len(points)
    return Position(
        latitude=sum(p.latitude for p in points) / total,
        longitude=sum(p.longitude for p in points) / total,
    )


def segments_intersect(
    a1: Position,
    a2: Position,
    b1: Position,
    b2: Position,
    epsilon: float = DETERMINANT_EPSILON,
) -> Optional[Position]:
    """
    Find the crossing point of segments a1-a2 and b1-b2.

    Solves a1 + t * r = b1 + u * s for the direction vectors r and s. The
    segments cross only when both t and u lie in [0, 1]. Parallel, collinear
    and zero-length segments never cross.

    Args:
        a1, a2: Endpoints of the first segment
        b1, b2: Endpoints of the second segment
        epsilon: Relative tolerance for treating the segments as parallel

    Returns:
        The intersection position, or None
    """
    # Vector components (x = latitude, y = longitude)
    r_x = a2.latitude - a1.latitude
    r_y = a2.longitude - a1.longitude
    s_x = b2.latitude - b1.latitude
    s_y = b2.longitude - b1.longitude

    denominator = r_x * s_y - r_y * s_x
    scale = (r_x * r_x + r_y * r_y) ** 0.5 * (s_x * s_x + s_y * s_y) ** 0.5
    if abs(denominator) <= epsilon * scale:
        return None

    q_x = b1.latitude - a1.latitude
    q_y = b1.longitude - a1.longitude

    t = (q_x * s_y - q_y * s_x) / denominator
    u = (q_x * r_y - q_y * r_x) / denominator

    if 0.0 <= t <= 1.0 and 0.0 <= u <= 1.0:
        return Position(
            latitude=a1.latitude + t * r_x,
            longitude=a1.longitude + t * r_y,
        )
    return None


def line_intersects_polygon(
    route: Sequence[Position],
    rings: Sequence[Sequence[Position]],
    epsilon: float = DETERMINANT_EPSILON,
) -> Optional[Position]:
    """
    Find the first crossing between a route and the edges of a polygon.

    Each ring is closed implicitly by an edge from its last vertex back to
    its first. Route segments form the outer loop; rings and their edges are
    visited in order inside it. Rings with fewer than three vertices are
    ignored.

    Args:
        route: Normalized route positions
        rings: Polygon rings (exterior first, then holes) in (lat, lon) order
        epsilon: Relative tolerance passed to segments_intersect

    Returns:
        The first crossing found, or None
    """
    if len(route) < 2:
        return None

    usable_rings = [ring for ring in rings if len(ring) >= 3]
    if not usable_rings:
        return None

    for start, end in zip(route, route[1:]):
        for ring in usable_rings:
            for i in range(len(ring)):
                hit = segments_intersect(
                    start, end, ring[i], ring[(i + 1) % len(ring)], epsilon
                )
                if hit is not None:
                    return hit
    return None


def line_intersects_line(
    route: Sequence[Position],
    other: Sequence[Position],
    epsilon: float = DETERMINANT_EPSILON,
) -> Optional[Position]:
    """
    Find the first crossing between two open polylines.

    Both lines must already be in (lat, lon) order. Route segments form the
    outer loop.
    """
    if len(route) < 2 or len(other) < 2:
        return None

    for start, end in zip(route, route[1:]):
        for other_start, other_end in zip(other, other[1:]):
            hit = segments_intersect(start, end, other_start, other_end, epsilon)
            if hit is not None:
                return hit
    return None

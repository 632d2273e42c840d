"""
Change-driven rescans of a route against hazard layers.

A caller feeds the monitor whatever inputs it has whenever they change.
Inputs are compared by their canonical JSON form, and the route is only
rescanned when one of them actually changed.
"""

import json
import logging
from typing import Any, Callable, Dict, Optional

from .geometry_utils import DETERMINANT_EPSILON
from .hazard import HazardFeatureSet, Intersection, coerce_hazard, find_route_intersection
from .route import Route

logger = logging.getLogger(__name__)

_UNSET = object()


def _fingerprint(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, HazardFeatureSet):
        value = {
            "original": value.original,
            "minus360": value.minus360,
            "plus360": value.plus360,
        }
    elif isinstance(value, Route):
        value = [list(point) for point in value.points]
    return json.dumps(value, sort_keys=True, default=str)


class RouteHazardMonitor:
    """Holds the current route and hazard inputs and rescans on change."""

    def __init__(
        self,
        on_intersection: Optional[Callable[[Intersection], None]] = None,
        on_clear: Optional[Callable[[], None]] = None,
        epsilon: float = DETERMINANT_EPSILON,
    ):
        self.on_intersection = on_intersection
        self.on_clear = on_clear
        self.epsilon = epsilon

        self.route: Optional[Route] = None
        self.forecast_cone: Optional[HazardFeatureSet] = None
        self.observed_track: Optional[HazardFeatureSet] = None
        self.intersection: Optional[Intersection] = None
        self.scan_count = 0

        self._fingerprints: Dict[str, Optional[str]] = {
            "route": None,
            "forecast_cone": None,
            "observed_track": None,
        }

    def update(
        self,
        route: Any = _UNSET,
        forecast_cone: Any = _UNSET,
        observed_track: Any = _UNSET,
    ) -> Optional[Intersection]:
        """
        Replace any changed inputs and rescan if something changed.

        Nothing is replaced unless the rescan succeeds, so a rejected input
        is checked again on the next update.

        Args:
            route: A Route or a list of route records; None clears it
            forecast_cone: Cone polygons as a HazardFeatureSet, the pre-shifted
                dict shape or a FeatureCollection; None clears it
            observed_track: Track lines, in the same forms as forecast_cone

        Returns:
            The current intersection, or None

        Raises:
            ParseError: If a changed input has malformed coordinates
        """
        inputs = {
            "route": self.route,
            "forecast_cone": self.forecast_cone,
            "observed_track": self.observed_track,
        }
        fingerprints = dict(self._fingerprints)

        if route is not _UNSET:
            if route is not None and not isinstance(route, Route):
                route = Route.from_records(route)
            inputs["route"] = route
            fingerprints["route"] = _fingerprint(route)

        for name, value in (("forecast_cone", forecast_cone), ("observed_track", observed_track)):
            if value is _UNSET:
                continue
            fingerprint = _fingerprint(value)
            if fingerprint != self._fingerprints[name]:
                inputs[name] = coerce_hazard(value)
                fingerprints[name] = fingerprint

        if fingerprints == self._fingerprints:
            logger.debug("Inputs unchanged, keeping previous result")
            return self.intersection

        intersection = self._scan(**inputs)

        self.route = inputs["route"]
        self.forecast_cone = inputs["forecast_cone"]
        self.observed_track = inputs["observed_track"]
        self._fingerprints = fingerprints
        self.intersection = intersection
        return intersection

    def rescan(self) -> Optional[Intersection]:
        """Scan the current route against the current hazard layers."""
        self.intersection = self._scan(self.route, self.forecast_cone, self.observed_track)
        return self.intersection

    def _scan(
        self,
        route: Optional[Route],
        forecast_cone: Optional[HazardFeatureSet],
        observed_track: Optional[HazardFeatureSet],
    ) -> Optional[Intersection]:
        self.scan_count += 1

        if route is None or (forecast_cone is None and observed_track is None):
            return None

        intersection = find_route_intersection(
            route.normalized_coords,
            forecast_cone=forecast_cone,
            observed_track=observed_track,
            on_intersection=self.on_intersection,
            epsilon=self.epsilon,
        )
        if intersection is None and self.on_clear is not None:
            self.on_clear()
        return intersection

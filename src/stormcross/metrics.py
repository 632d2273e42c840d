"""
Module for collecting and logging metrics related to a hazard scan.
"""

import logging
from typing import Dict, NamedTuple, Optional

from .config import StormcrossConfig
from .geometry_utils import count_antimeridian_crossings
from .hazard import HazardFeatureSet, Intersection
from .route import Route

logger = logging.getLogger(__name__)


class ScanMetrics(NamedTuple):
    """Container for scan metrics data."""

    route_points: int
    antimeridian_crossings: int
    longitude_span: float
    cone_feature_counts: Dict[str, int]
    track_feature_counts: Dict[str, int]
    intersection_kind: Optional[str]


def _feature_counts(hazard: Optional[HazardFeatureSet]) -> Dict[str, int]:
    if hazard is None:
        return {}
    return {which.value: len(features) for which, features in hazard.copies()}


def collect_metrics(
    route: Route,
    forecast_cone: Optional[HazardFeatureSet],
    observed_track: Optional[HazardFeatureSet],
    intersection: Optional[Intersection],
) -> ScanMetrics:
    """
    Collect metrics from a completed scan.

    Args:
        route: The scanned route
        forecast_cone: Cone polygons, if any were scanned
        observed_track: Track lines, if any were scanned
        intersection: The scan result

    Returns:
        ScanMetrics containing all collected metrics
    """
    _, west, _, east = route.get_bbox()
    return ScanMetrics(
        route_points=len(route),
        antimeridian_crossings=count_antimeridian_crossings(route.coords),
        longitude_span=east - west,
        cone_feature_counts=_feature_counts(forecast_cone),
        track_feature_counts=_feature_counts(observed_track),
        intersection_kind=intersection.kind.value if intersection else None,
    )


def log_metrics(metrics: ScanMetrics, config: StormcrossConfig) -> None:
    """
    Log detailed metrics after a scan.

    Args:
        metrics: ScanMetrics containing collected metrics
        config: Settings, including the metrics flag
    """
    if not config.metrics:
        return

    logger.debug("=== STORMCROSS_METRICS ===")
    logger.debug(f"route_points={metrics.route_points}")
    logger.debug(f"antimeridian_crossings={metrics.antimeridian_crossings}")
    logger.debug(f"longitude_span={metrics.longitude_span:.4f}")

    for key, count in metrics.cone_feature_counts.items():
        logger.debug(f"features[{key}][cone]={count}")
    for key, count in metrics.track_feature_counts.items():
        logger.debug(f"features[{key}][track]={count}")

    logger.debug(f"intersection={metrics.intersection_kind or 'none'}")
    logger.debug("=== END_STORMCROSS_METRICS ===")

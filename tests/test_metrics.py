import logging

from stormcross.config import StormcrossConfig
from stormcross.geometry import Position
from stormcross.hazard import HazardCopy, HazardFeatureSet, HazardKind, Intersection
from stormcross.metrics import collect_metrics, log_metrics
from stormcross.route import Route


def _route():
    return Route.from_positions([Position(0, 170), Position(0, -170), Position(5, -160)])


def test_collect_metrics():
    cone = HazardFeatureSet(original=[{}], minus360=[{}], plus360=[{}])
    hit = Intersection(Position(0, 180), HazardKind.POLYGON, HazardCopy.PLUS_360, 0)

    metrics = collect_metrics(_route(), cone, None, hit)

    assert metrics.route_points == 3
    assert metrics.antimeridian_crossings == 1
    assert metrics.longitude_span == 30.0
    assert metrics.cone_feature_counts == {"original": 1, "minus360": 1, "plus360": 1}
    assert metrics.track_feature_counts == {}
    assert metrics.intersection_kind == "polygon"


def test_log_metrics_respects_flag(caplog):
    metrics = collect_metrics(_route(), None, None, None)

    with caplog.at_level(logging.DEBUG, logger="stormcross.metrics"):
        log_metrics(metrics, StormcrossConfig(metrics=False))
    assert caplog.text == ""

    with caplog.at_level(logging.DEBUG, logger="stormcross.metrics"):
        log_metrics(metrics, StormcrossConfig(metrics=True))
    assert "=== STORMCROSS_METRICS ===" in caplog.text
    assert "intersection=none" in caplog.text
    assert "=== END_STORMCROSS_METRICS ===" in caplog.text

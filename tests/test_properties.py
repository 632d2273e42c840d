import pytest
from hypothesis import given, strategies as st, assume
from stormcross.geometry import Position
from stormcross.geometry_utils import (
    centroid,
    line_intersects_line,
    normalize_longitudes,
    segments_intersect,
)

# Strategy for raw route coordinates
valid_lat = st.floats(-90.0, 90.0)
valid_lon = st.floats(-180.0, 180.0)
valid_position = st.builds(Position, latitude=valid_lat, longitude=valid_lon)
route_strategy = st.lists(valid_position, max_size=30)

# Integer grid keeps direction vectors exact
grid_position = st.builds(
    Position, latitude=st.integers(-80, 80), longitude=st.integers(-180, 180)
)


class TestNormalizeProperties:

    @given(route_strategy)
    def test_normalize_is_idempotent(self, route):
        """Normalizing twice gives the same result as normalizing once."""
        once = normalize_longitudes(route)
        assert normalize_longitudes(once) == once

    @given(route_strategy)
    def test_normalize_preserves_length_and_latitudes(self, route):
        normalized = normalize_longitudes(route)
        assert len(normalized) == len(route)
        assert [p.latitude for p in normalized] == [p.latitude for p in route]

    @given(route_strategy)
    def test_consecutive_jumps_at_most_180(self, route):
        normalized = normalize_longitudes(route)
        for prev, curr in zip(normalized, normalized[1:]):
            assert abs(curr.longitude - prev.longitude) <= 180.0

    @given(route_strategy)
    def test_shift_is_whole_turns(self, route):
        """Every longitude moves by a multiple of 360 degrees."""
        for raw, adjusted in zip(route, normalize_longitudes(route)):
            turns = (adjusted.longitude - raw.longitude) / 360.0
            assert turns == pytest.approx(round(turns), abs=1e-9)

    @given(st.lists(st.builds(Position, latitude=valid_lat, longitude=st.floats(-90.0, 90.0)), max_size=30))
    def test_route_without_jumps_unchanged(self, route):
        assert normalize_longitudes(route) == route


class TestCentroidProperties:

    @given(st.lists(valid_position, min_size=1, max_size=30))
    def test_centroid_within_bounds(self, points):
        center = centroid(points)
        assert min(p.latitude for p in points) - 1e-9 <= center.latitude
        assert center.latitude <= max(p.latitude for p in points) + 1e-9
        assert min(p.longitude for p in points) - 1e-9 <= center.longitude
        assert center.longitude <= max(p.longitude for p in points) + 1e-9

    @given(valid_position, st.integers(1, 20))
    def test_centroid_of_repeated_point(self, point, count):
        center = centroid([point] * count)
        assert center.latitude == pytest.approx(point.latitude)
        assert center.longitude == pytest.approx(point.longitude)


class TestSegmentProperties:

    @given(grid_position, grid_position, st.integers(-20, 20), st.integers(-20, 20))
    def test_translated_copy_is_parallel(self, a1, a2, d_lat, d_lon):
        """A segment never crosses a translated copy of itself."""
        b1 = Position(a1.latitude + d_lat, a1.longitude + d_lon)
        b2 = Position(a2.latitude + d_lat, a2.longitude + d_lon)
        assert segments_intersect(a1, a2, b1, b2) is None

    @given(grid_position, grid_position, grid_position, grid_position)
    def test_hit_lies_on_first_segment_bounds(self, a1, a2, b1, b2):
        hit = segments_intersect(a1, a2, b1, b2)
        assume(hit is not None)
        assert min(a1.latitude, a2.latitude) - 1e-9 <= hit.latitude
        assert hit.latitude <= max(a1.latitude, a2.latitude) + 1e-9
        assert min(a1.longitude, a2.longitude) - 1e-9 <= hit.longitude
        assert hit.longitude <= max(a1.longitude, a2.longitude) + 1e-9

    @given(grid_position, grid_position, grid_position, grid_position)
    def test_swapping_endpoints_keeps_result_kind(self, a1, a2, b1, b2):
        """Reversing the direction of the first segment does not change whether it crosses."""
        forward = segments_intersect(a1, a2, b1, b2)
        backward = segments_intersect(a2, a1, b1, b2)
        assert (forward is None) == (backward is None)

    @given(st.lists(grid_position, max_size=10), st.lists(grid_position, max_size=10))
    def test_line_result_is_deterministic(self, route, other):
        assert line_intersects_line(route, other) == line_intersects_line(route, other)

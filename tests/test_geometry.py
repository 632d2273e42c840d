import math
import pytest

from stormcross.geometry import (
    ParseError,
    Position,
    coords_to_polyline,
    geodesic_distance_nm,
    parse_coordinate,
    parse_position,
    position_from_geojson,
    positions_from_geojson,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        ("12.5", 12.5),
        ("  -179.25 ", -179.25),
        (42, 42.0),
        (-0.5, -0.5),
        ("1e1", 10.0),
    ],
)
def test_parse_coordinate_accepts_numbers_and_numeric_strings(value, expected):
    assert parse_coordinate(value) == expected


@pytest.mark.parametrize(
    "value",
    [None, "", "   ", "north", "12,5", "nan", "NaN", "inf", float("nan"), True, [1.0], {}],
)
def test_parse_coordinate_rejects_invalid_values(value):
    with pytest.raises(ParseError):
        parse_coordinate(value)


def test_parse_error_is_a_value_error():
    assert issubclass(ParseError, ValueError)


def test_parse_coordinate_names_field_in_message():
    with pytest.raises(ParseError, match="longitude"):
        parse_coordinate("east", "longitude")


def test_parse_position():
    assert parse_position("10.5", "-60") == Position(10.5, -60.0)
    with pytest.raises(ParseError, match="latitude"):
        parse_position("x", "1")


def test_position_from_geojson_reorders_axes():
    assert position_from_geojson([-150.0, 38.0]) == Position(latitude=38.0, longitude=-150.0)
    # Altitude is ignored
    assert position_from_geojson([10, 20, 300]) == Position(20.0, 10.0)


@pytest.mark.parametrize("coord", [[1.0], [], "12", None, [None, 1.0], ["a", "b"]])
def test_position_from_geojson_rejects_malformed(coord):
    with pytest.raises(ParseError):
        position_from_geojson(coord)


def test_positions_from_geojson():
    assert positions_from_geojson([[0, 1], [2, 3]]) == [Position(1, 0), Position(3, 2)]
    with pytest.raises(ParseError):
        positions_from_geojson(5)


def test_coords_to_polyline_uses_lon_lat_order():
    line = coords_to_polyline([Position(10, 20), Position(11, 25)])
    assert list(line.coords) == [(20.0, 10.0), (25.0, 11.0)]
    assert line.bounds == (20.0, 10.0, 25.0, 11.0)


def test_coords_to_polyline_requires_two_positions():
    with pytest.raises(ValueError):
        coords_to_polyline([Position(0, 0)])
    with pytest.raises(ValueError):
        coords_to_polyline([])


def test_geodesic_distance_one_degree_of_latitude():
    # One degree of latitude at the equator is just under 60 nautical miles
    distance = geodesic_distance_nm(Position(0, 0), Position(1, 0))
    assert distance == pytest.approx(59.7, abs=0.1)


def test_geodesic_distance_across_antimeridian_is_short():
    distance = geodesic_distance_nm(Position(0, 179.5), Position(0, -179.5))
    assert distance == pytest.approx(60.1, abs=0.2)
    assert not math.isnan(distance)

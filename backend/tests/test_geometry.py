import pytest

from parkmap.services.geometry.measure import (
    GeometryError,
    contains_point,
    containing_ids,
    polygon_area_m2,
    representative_point,
    try_polygon_area_m2,
)

BOWTIE = {"type": "Polygon", "coordinates": [[[0, 0], [1, 1], [1, 0], [0, 1], [0, 0]]]}


def test_area_of_small_square_near_equator(square):
    # 0.01° x 0.01° ≈ 1113 m x 1106 m
    assert polygon_area_m2(square(0.0, 0.0)) == pytest.approx(1_230_900, rel=0.01)


def test_area_is_independent_of_ring_orientation(square):
    poly = square(37.6, 55.7)
    reversed_poly = {"type": "Polygon", "coordinates": [list(reversed(poly["coordinates"][0]))]}
    assert polygon_area_m2(poly) == pytest.approx(polygon_area_m2(reversed_poly))


@pytest.mark.parametrize("geometry", [
    BOWTIE,
    {"type": "Polygon"},
    {"type": "Point", "coordinates": [0, 0]},
    "not a geometry",
])
def test_malformed_geometry_raises(geometry):
    with pytest.raises(GeometryError):
        polygon_area_m2(geometry)


def test_try_area_returns_none_for_unknown():
    assert try_polygon_area_m2(BOWTIE) is None
    assert try_polygon_area_m2(None) is None


def test_contains_point(square):
    poly = square(37.6, 55.7)
    assert contains_point(poly, 55.705, 37.605)
    assert not contains_point(poly, 55.8, 37.605)
    # 境界上
    assert contains_point(poly, 55.7, 37.605)


def test_containing_ids_skips_malformed(square):
    items = [(1, square(37.6, 55.7)), (2, BOWTIE), (3, None), (4, square(40.0, 50.0))]
    assert containing_ids(items, 55.705, 37.605) == [1]
    assert containing_ids(items, 0.5, 0.5) == []


def test_representative_point_is_inside(square):
    poly = square(37.6, 55.7)
    lat, lng = representative_point(poly)
    assert contains_point(poly, lat, lng)

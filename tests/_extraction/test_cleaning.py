"""
Tests for the containment-only shadow cleaning.
"""

import pytest

from skyshade._extraction.cleaning import (
    clean_shadows,
    get_azimuth_interval,
    is_shadow_contained,
    remove_sector_shadows,
    shadow_polygon,
)
from skyshade._extraction.types import Shadow, ShadowPoint


def make_shadow(azimuths, elevations, shadow_id="s", cadastral_number="R"):
    points = [ShadowPoint(a, e) for a, e in zip(azimuths, elevations)]
    return Shadow(
        id=shadow_id,
        gid="1",
        cadastral_number=cadastral_number,
        down_left=points[0],
        up_left=points[1],
        up_right=points[2],
        down_right=points[3],
    )


def rectangle(west, east, top, shadow_id="s"):
    return make_shadow([west, west, east, east], [0.0, top, top, 0.0], shadow_id=shadow_id)


@pytest.fixture
def big():
    return rectangle(-20.0, 20.0, 40.0, shadow_id="big")


@pytest.fixture
def small():
    return rectangle(-10.0, 10.0, 20.0, shadow_id="small")


@pytest.fixture
def overlapping():
    return rectangle(10.0, 40.0, 30.0, shadow_id="overlapping")


class TestShadowGeometry:
    """Test the angular polygon helpers."""

    def test_polygon_area(self, big):
        assert shadow_polygon(big).area == pytest.approx(40.0 * 40.0)

    def test_polygon_across_south_is_narrow(self):
        shadow = make_shadow([170.0, 170.0, -170.0, -170.0], [0.0, 10.0, 10.0, 0.0])
        assert shadow_polygon(shadow).area == pytest.approx(20.0 * 10.0)

    def test_azimuth_interval(self, big):
        assert get_azimuth_interval(big) == pytest.approx((-20.0, 20.0))

    def test_azimuth_interval_across_south(self):
        shadow = make_shadow([170.0, 170.0, -170.0, -170.0], [0.0, 10.0, 10.0, 0.0])
        assert get_azimuth_interval(shadow) == pytest.approx((170.0, -170.0))


class TestIsShadowContained:
    """Test the pairwise containment test."""

    def test_contained(self, big, small):
        assert is_shadow_contained(small, big)
        assert not is_shadow_contained(big, small)

    def test_partial_overlap(self, big, overlapping):
        assert not is_shadow_contained(overlapping, big)
        assert not is_shadow_contained(big, overlapping)

    def test_identical(self, big):
        assert is_shadow_contained(big, rectangle(-20.0, 20.0, 40.0))

    def test_shared_boundary_counts_as_inside(self, big):
        assert is_shadow_contained(rectangle(10.0, 20.0, 40.0), big)

    def test_across_south(self):
        outer = make_shadow([170.0, 170.0, -170.0, -170.0], [0.0, 30.0, 30.0, 0.0])
        inner = make_shadow([175.0, 175.0, -175.0, -175.0], [0.0, 10.0, 10.0, 0.0])
        assert is_shadow_contained(inner, outer)
        assert not is_shadow_contained(outer, inner)

    def test_uses_quadrilateral_not_bounding_box(self):
        # Top edge slopes from 40 deg down to 10 deg
        outer = make_shadow([-20.0, -20.0, 20.0, 20.0], [0.0, 40.0, 10.0, 0.0])
        inner = rectangle(10.0, 15.0, 30.0)
        assert not is_shadow_contained(inner, outer)


class TestCleanShadows:
    """Test redundant shadow removal."""

    def test_empty_and_single(self, big):
        assert clean_shadows([]) == []
        assert clean_shadows([big]) == [big]

    def test_contained_shadow_removed(self, big, small):
        assert clean_shadows([big, small]) == [big]
        assert clean_shadows([small, big]) == [big]

    def test_partial_overlap_kept(self, big, overlapping):
        assert clean_shadows([big, overlapping]) == [big, overlapping]

    def test_identical_reduce_to_first(self):
        first = rectangle(-5.0, 5.0, 10.0, shadow_id="first")
        second = rectangle(-5.0, 5.0, 10.0, shadow_id="second")

        cleaned = clean_shadows([first, second])
        assert [shadow.id for shadow in cleaned] == ["first"]

    def test_identical_pair_inside_larger_both_removed(self, big):
        first = rectangle(-5.0, 5.0, 10.0, shadow_id="first")
        second = rectangle(-5.0, 5.0, 10.0, shadow_id="second")

        assert clean_shadows([first, second, big]) == [big]

    def test_order_preserved(self, big, small, overlapping):
        other = rectangle(100.0, 120.0, 5.0, shadow_id="other")
        cleaned = clean_shadows([overlapping, small, other, big])
        assert [shadow.id for shadow in cleaned] == ["overlapping", "other", "big"]

    def test_idempotent(self, big, small, overlapping):
        shadows = [
            small,
            big,
            overlapping,
            rectangle(-5.0, 5.0, 10.0, shadow_id="a"),
            rectangle(-5.0, 5.0, 10.0, shadow_id="b"),
            make_shadow([170.0, 170.0, -170.0, -170.0], [0.0, 30.0, 30.0, 0.0], shadow_id="south"),
            make_shadow([175.0, 175.0, -175.0, -175.0], [0.0, 10.0, 10.0, 0.0], shadow_id="south-small"),
        ]
        once = clean_shadows(shadows)
        assert clean_shadows(once) == once
        assert [shadow.id for shadow in once] == ["big", "overlapping", "south"]

    def test_no_survivor_is_contained_in_another(self, big, small, overlapping):
        cleaned = clean_shadows([small, big, overlapping])
        for i, inner in enumerate(cleaned):
            for j, outer in enumerate(cleaned):
                if i != j:
                    assert not is_shadow_contained(inner, outer)


class TestRemoveSectorShadows:
    """Test dropping shadows inside excluded sectors."""

    def test_sector_filter(self):
        inside = rectangle(150.0, 170.0, 20.0, shadow_id="inside")
        straddling = rectangle(100.0, 130.0, 20.0, shadow_id="straddling")
        across_south = make_shadow([170.0, 170.0, -170.0, -170.0], [0.0, 5.0, 5.0, 0.0], shadow_id="south")

        kept = remove_sector_shadows([inside, straddling, across_south], [(123.0, -123.0)])
        assert [shadow.id for shadow in kept] == ["straddling"]

    def test_no_sectors_keeps_everything(self, big, small):
        assert remove_sector_shadows([big, small], []) == [big, small]

import numpy as np
import pytest

from skyshade._utils.geometry.angles import (
    angular_span,
    azimuth_in_sector,
    interval_contains,
    normalize_azimuth,
    unwrap_near,
    unwrap_sequence,
)


class TestNormalizeAzimuth:
    """Test wrapping into [-180, 180)."""

    @pytest.mark.parametrize(
        ("angle", "expected"),
        [(0.0, 0.0), (90.0, 90.0), (180.0, -180.0), (-180.0, -180.0), (190.0, -170.0), (-190.0, 170.0), (720.0, 0.0)],
    )
    def test_scalar(self, angle, expected):
        assert normalize_azimuth(angle) == pytest.approx(expected)

    def test_scalar_returns_float(self):
        assert isinstance(normalize_azimuth(45), float)

    def test_array(self):
        result = normalize_azimuth(np.array([179.0, 181.0, -181.0, 360.0]))
        assert np.allclose(result, [179.0, -179.0, 179.0, 0.0])

    def test_result_range(self):
        angles = np.linspace(-1000, 1000, 2001)
        result = normalize_azimuth(angles)
        assert np.all(result >= -180.0)
        assert np.all(result < 180.0)

    def test_tiny_negative_stays_in_range(self):
        assert -180.0 <= normalize_azimuth(-1e-17) < 180.0


class TestUnwrap:
    """Test unwrapping toward a reference azimuth."""

    def test_unwrap_across_south(self):
        assert unwrap_near(-170.0, 170.0) == pytest.approx(190.0)
        assert unwrap_near(170.0, -170.0) == pytest.approx(-190.0)

    def test_unwrap_is_identity_when_close(self):
        assert unwrap_near(10.0, 20.0) == pytest.approx(10.0)

    def test_unwrap_result_within_half_turn(self):
        for reference in (-179.0, -90.0, 0.0, 135.0, 179.0):
            for angle in np.linspace(-180, 179, 37):
                assert abs(unwrap_near(angle, reference) - reference) <= 180.0

    def test_unwrap_sequence(self):
        result = unwrap_sequence([175.0, 179.0, -178.0, -175.0])
        assert np.allclose(result, [175.0, 179.0, 182.0, 185.0])

    def test_unwrap_sequence_empty(self):
        assert unwrap_sequence([]).size == 0

    def test_span_across_south_is_not_near_full_turn(self):
        assert angular_span([170.0, 170.0, -170.0, -170.0]) == pytest.approx(20.0)

    def test_span_single_direction(self):
        assert angular_span([30.0, 30.0, 30.0, 30.0]) == 0.0


class TestIntervalContains:
    """Test circular interval containment."""

    def test_plain_interval(self):
        assert interval_contains((-20.0, 20.0), (-10.0, 15.0))
        assert not interval_contains((-20.0, 20.0), (-10.0, 25.0))

    def test_interval_across_south(self):
        assert interval_contains((170.0, -170.0), (175.0, -175.0))
        assert interval_contains((170.0, -170.0), (-175.0, -172.0))
        assert not interval_contains((170.0, -170.0), (160.0, 175.0))

    def test_interval_contains_itself(self):
        assert interval_contains((10.0, 50.0), (10.0, 50.0))

    def test_tolerance(self):
        assert not interval_contains((10.0, 50.0), (9.9999, 50.0))
        assert interval_contains((10.0, 50.0), (9.9999, 50.0), tolerance=1e-3)

    def test_full_circle_contains_everything(self):
        assert interval_contains((-180.0, 180.0), (100.0, -100.0))

    def test_azimuth_in_sector(self):
        assert azimuth_in_sector(-179.0, 123.0, -123.0)
        assert azimuth_in_sector(180.0, 123.0, -123.0)
        assert not azimuth_in_sector(0.0, 123.0, -123.0)

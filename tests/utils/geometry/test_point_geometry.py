import numpy as np
import pytest

from skyshade._utils.geometry.point_geometry import (
    horizontal_distance,
    lonlat_to_utm,
    srid_for_longitude,
    utm_to_lonlat,
    utm_zone_for_longitude,
)


def test_horizontal_distance_ignores_height():
    assert horizontal_distance((0.0, 0.0, 0.0), (3.0, 4.0, 100.0)) == pytest.approx(5.0)


@pytest.mark.parametrize(
    ("longitude", "zone"),
    [(-15.4, 28), (-8.5, 29), (-3.7, 30), (2.17, 31), (180.0, 60), (-180.0, 1)],
)
def test_utm_zone_for_longitude(longitude, zone):
    assert utm_zone_for_longitude(longitude) == zone


def test_utm_zone_rejects_out_of_range():
    with pytest.raises(ValueError):
        utm_zone_for_longitude(200.0)


def test_srid_for_spanish_longitudes():
    assert srid_for_longitude(-3.7038) == 25830
    assert srid_for_longitude(2.1734) == 25831


def test_srid_outside_coverage():
    with pytest.raises(ValueError):
        srid_for_longitude(13.4)


def test_lonlat_utm_round_trip_madrid():
    x, y, srid = lonlat_to_utm(-3.7038, 40.4168)
    assert srid == 25830
    # Puerta del Sol is around 440 km easting, 4474 km northing in zone 30N
    assert 430_000 < x < 450_000
    assert 4_460_000 < y < 4_490_000

    longitude, latitude = utm_to_lonlat(x, y, srid)
    assert np.isclose(longitude, -3.7038, atol=1e-7)
    assert np.isclose(latitude, 40.4168, atol=1e-7)

import pytest

from salonbook.utils.distance import format_distance, haversine_distance_km


@pytest.mark.utils
class TestDistance:
    """Test great-circle distance and its display text."""

    def test_same_point_is_zero(self):
        assert haversine_distance_km(40.7357, -74.1724, 40.7357, -74.1724) == 0

    def test_one_degree_of_longitude_on_equator(self):
        """Test the 6371 km earth radius."""
        distance = haversine_distance_km(0, 0, 0, 1)

        assert distance == pytest.approx(111.195, rel=1e-4)

    def test_distance_is_symmetric(self):
        newark_to_nyc = haversine_distance_km(40.7357, -74.1724, 40.7128, -74.0060)
        nyc_to_newark = haversine_distance_km(40.7128, -74.0060, 40.7357, -74.1724)

        assert newark_to_nyc == pytest.approx(nyc_to_newark)
        assert 13 < newark_to_nyc < 15

    def test_format_distance_meters(self):
        """Test distances under 1 km are shown in whole meters."""
        assert format_distance(0.85) == "850 m"
        assert format_distance(0) == "0 m"

    def test_format_distance_rounds_half_meters_up(self):
        assert format_distance(0.0025) == "3 m"
        assert format_distance(0.0005) == "1 m"
        assert format_distance(0.0024) == "2 m"

    def test_format_distance_kilometers(self):
        """Test distances of 1 km and more get one decimal."""
        assert format_distance(3.2) == "3.2 km"
        assert format_distance(1) == "1.0 km"
        assert format_distance(12.345) == "12.3 km"

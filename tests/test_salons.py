import pytest
import json

NEWARK = (40.735660, -74.172370)
# 0.0076 degrees of latitude north of the Newark salon, about 845 m
NEARBY_POINT = (40.743260, -74.172370)


@pytest.fixture
def manhattan_salon(make_salon, owner):
    return make_salon(
        owner, name="Midtown Cuts", city="New York", latitude=40.712800, longitude=-74.006000
    )


@pytest.mark.salon
class TestSalons:
    """Test suite for salon endpoints."""

    def test_home(self, client):
        """Test the health endpoint."""
        response = client.get("/")

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data["status"] == "ok"

    def test_get_nearby_salons(self, client, salon, manhattan_salon):
        """Test nearby salons within the default radius."""
        response = client.get(
            f"/api/salons/nearby?user_lat={NEARBY_POINT[0]}&user_long={NEARBY_POINT[1]}"
        )

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data["radius_km"] == 10.0
        assert data["results_found"] == 1
        assert data["salons"][0]["id"] == salon.id
        assert data["salons"][0]["distance_text"] == "845 m"
        assert data["salons"][0]["distance_km"] == pytest.approx(0.845, abs=0.001)

    def test_get_nearby_salons_sorted_by_distance(
        self, client, salon, manhattan_salon
    ):
        """Test a wider radius returns both salons, nearest first."""
        response = client.get(
            f"/api/salons/nearby?user_lat={NEWARK[0]}&user_long={NEWARK[1]}&radius_km=25"
        )

        data = json.loads(response.data)
        assert [s["id"] for s in data["salons"]] == [salon.id, manhattan_salon.id]
        assert data["salons"][0]["distance_text"] == "0 m"
        assert data["salons"][1]["distance_text"].endswith(" km")

    def test_get_nearby_salons_skips_inactive(self, client, make_salon, owner):
        make_salon(owner, name="Closed Down", is_active=False)

        response = client.get(
            f"/api/salons/nearby?user_lat={NEWARK[0]}&user_long={NEWARK[1]}"
        )

        assert json.loads(response.data)["results_found"] == 0

    def test_get_nearby_salons_missing_coordinates(self, client):
        response = client.get("/api/salons/nearby?user_lat=40.7")

        assert response.status_code == 400

    def test_get_nearby_salons_out_of_range(self, client):
        response = client.get("/api/salons/nearby?user_lat=95&user_long=10")

        assert response.status_code == 400

    def test_get_salon_services(self, client, salon, haircut, beard_trim, make_service):
        """Test only active services are listed, by name."""
        make_service(salon, name="Coloring", is_active=False)

        response = client.get(f"/api/salons/details/{salon.id}/services")

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data["salon_id"] == salon.id
        assert data["services_found"] == 2
        assert [s["name"] for s in data["services"]] == ["Beard Trim", "Haircut"]
        assert data["services"][1]["price"] == 50.0
        assert data["services"][1]["duration_minutes"] == 60

    def test_get_salon_services_nonexistent(self, client):
        """Test getting services for non-existent salon."""
        response = client.get("/api/salons/details/99999/services")

        assert response.status_code == 404

    def test_get_directions_default_provider(self, client, salon):
        response = client.get(f"/api/salons/details/{salon.id}/directions")

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data["map_provider"] == "openstreetmap"
        assert data["url"].startswith("https://www.openstreetmap.org/directions")
        assert "40.73566" in data["url"]

    def test_get_directions_follows_admin_setting(
        self, client, auth_headers, admin, salon
    ):
        """Test the directions link switches as soon as the admin changes provider."""
        response = client.put(
            "/api/settings",
            json={"map_provider": "google"},
            headers=auth_headers(admin),
        )
        assert response.status_code == 200

        response = client.get(f"/api/salons/details/{salon.id}/directions")

        data = json.loads(response.data)
        assert data["map_provider"] == "google"
        assert data["url"].startswith("https://www.google.com/maps/dir/?api=1")

    def test_get_directions_without_location(self, client, make_salon, owner):
        unmapped = make_salon(owner, latitude=None, longitude=None)

        response = client.get(f"/api/salons/details/{unmapped.id}/directions")

        assert response.status_code == 400

# math functions to calculate coordinate distance
from math import radians, sin, cos, sqrt, atan2, floor

EARTH_RADIUS_KM = 6371.0


def haversine_distance_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points given in degrees, in kilometers."""
    dlat = radians(lat2 - lat1)
    dlon = radians(lon2 - lon1)
    a = sin(dlat / 2) ** 2 + cos(radians(lat1)) * cos(radians(lat2)) * sin(dlon / 2) ** 2
    c = 2 * atan2(sqrt(a), sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def format_distance(distance_km: float) -> str:
    """Render a distance for display: "850 m" below one kilometer, else "3.2 km"."""
    if distance_km < 1:
        # halves round up (2.5 m -> 3 m)
        return f"{floor(distance_km * 1000 + 0.5)} m"
    return f"{distance_km:.1f} km"

from __future__ import annotations

import math
from math import asin, cos, radians, sin, sqrt

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance in kilometres between two lat/lng points."""
    dlat = radians(lat2 - lat1)
    dlng = radians(lng2 - lng1)
    a = sin(dlat / 2) ** 2 + cos(radians(lat1)) * cos(radians(lat2)) * sin(dlng / 2) ** 2
    return 2 * EARTH_RADIUS_KM * asin(sqrt(min(1.0, a)))


def estimate_eta_minutes(distance_km: float, average_speed_kmh: float = 30.0) -> int:
    if average_speed_kmh <= 0:
        raise ValueError("average_speed_kmh must be positive")
    km_per_minute = average_speed_kmh / 60
    return math.ceil(distance_km / km_per_minute)

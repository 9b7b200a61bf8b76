"""
Great-circle distance helpers.

All distances in the service are kilometres; miles only appear when turning
a distance into a drive-time estimate.
"""

import math

EARTH_RADIUS_KM = 6371.0
KM_PER_MILE = 1.609344


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Distance between two lat/lon points in kilometres (Haversine formula)."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)

    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def distance_between(a, b) -> float:
    """Haversine distance between two objects exposing latitude/longitude."""
    return haversine_km(a.latitude, a.longitude, b.latitude, b.longitude)


def km_to_miles(km: float) -> float:
    return km / KM_PER_MILE

"""
distance.py
-----------
Great-circle ("as the crow flies") distances using the Haversine formula.

Usage
-----
from distance import haversine_km
from location_models import Coordinate

haversine_km(Coordinate(12.97, 77.59), Coordinate(13.0, 77.6))
"""

from math import atan2, cos, radians, sin, sqrt

from location_models import Coordinate

EARTH_RADIUS_KM = 6371.0


def haversine_km(a: Coordinate, b: Coordinate) -> float:
    """Distance in kilometers between two coordinates."""
    dlat = radians(b.latitude - a.latitude)
    dlon = radians(b.longitude - a.longitude)
    h = sin(dlat / 2) ** 2 + cos(radians(a.latitude)) * cos(radians(b.latitude)) * sin(dlon / 2) ** 2
    # rounding can push h a hair outside [0, 1] for antipodal points
    h = min(max(h, 0.0), 1.0)
    return 2 * EARTH_RADIUS_KM * atan2(sqrt(h), sqrt(1 - h))


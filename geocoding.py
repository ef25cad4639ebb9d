# geocoding.py
# Forward geocoding of a typed address through the OpenStreetMap Nominatim API.
import logging
from typing import Dict, Optional

import requests

logger = logging.getLogger(__name__)

BASE_URL = "https://nominatim.openstreetmap.org/search"

USER_AGENT = "NearestFacilityFinder/1.0 (nearest-finder@example.com)"

GEOCODE_TIMEOUT_S = 20


def geocode_address(address: str, *, timeout: float = GEOCODE_TIMEOUT_S) -> Optional[Dict]:
    """
    Look up an address with Nominatim and return its display name, lat and lon,
    or None when nothing matched.

    Network and HTTP failures propagate as ``requests.RequestException``;
    a response that is not a list of place objects raises ValueError.
    """
    params = {"q": address, "format": "json", "limit": 1, "addressdetails": 1}
    response = requests.get(BASE_URL, params=params, headers={"User-Agent": USER_AGENT}, timeout=timeout)
    response.raise_for_status()

    data = response.json()
    if not data:
        logger.info("Nominatim found no match for %r", address)
        return None
    if not isinstance(data, list) or not isinstance(data[0], dict):
        raise ValueError(f"unexpected Nominatim response for {address!r}")

    top = data[0]
    return {
        "display_name": top.get("display_name"),
        "lat": float(top["lat"]),
        "lon": float(top["lon"]),
    }

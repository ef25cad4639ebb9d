"""
geo_position.py
---------------
One-shot acquisition of the user's current position.

A location service is any object with a
``get_current_position(high_accuracy: bool) -> Coordinate`` method that
raises PositionError on failure. Three are provided:

- StaticLocationService: a fixed, already-known position (e.g. from the CLI).
- IPLocationService: asks an IP geolocation HTTP endpoint.
- AddressLocationService: forward-geocodes a typed address with Nominatim.

Usage
-----
from geo_position import StaticLocationService, acquire_position

position = acquire_position(StaticLocationService(12.97, 77.59))
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol

import requests

from geocoding import geocode_address
from location_errors import PositionError, PositionErrorReason
from location_models import Coordinate

__all__ = [
    "LocationService",
    "StaticLocationService",
    "IPLocationService",
    "AddressLocationService",
    "acquire_position",
]

logger = logging.getLogger(__name__)

DEFAULT_IP_ENDPOINT = "https://ipapi.co/json/"
IP_LOOKUP_TIMEOUT_S = 10


class LocationService(Protocol):
    def get_current_position(self, high_accuracy: bool = True) -> Coordinate:
        ...


def _position_error_from_request(e: requests.RequestException) -> PositionError:
    """Translate a requests failure into the matching PositionError."""
    # ConnectTimeout is both a Timeout and a ConnectionError; timeout wins
    if isinstance(e, requests.Timeout):
        return PositionError(PositionErrorReason.TIMEOUT, str(e))
    if isinstance(e, requests.ConnectionError):
        return PositionError(PositionErrorReason.SERVICE_UNAVAILABLE, str(e))
    if isinstance(e, requests.HTTPError) and e.response is not None:
        status = e.response.status_code
        if status in (401, 403):
            return PositionError(PositionErrorReason.PERMISSION_DENIED, f"HTTP {status}")
        if status == 429 or status >= 500:
            return PositionError(PositionErrorReason.SERVICE_UNAVAILABLE, f"HTTP {status}")
        return PositionError(PositionErrorReason.POSITION_UNAVAILABLE, f"HTTP {status}")
    return PositionError(PositionErrorReason.SERVICE_UNAVAILABLE, str(e))


def _coordinate_or_error(lat, lon, origin: str) -> Coordinate:
    if lat is None or lon is None:
        raise PositionError(PositionErrorReason.POSITION_UNAVAILABLE, f"{origin} returned no coordinates")
    try:
        return Coordinate(float(lat), float(lon))
    except (TypeError, ValueError) as e:
        raise PositionError(PositionErrorReason.POSITION_UNAVAILABLE, f"{origin}: {e}") from e


class StaticLocationService:
    """A location service that always reports the same position."""

    def __init__(self, latitude: float, longitude: float):
        self._latitude = latitude
        self._longitude = longitude

    def get_current_position(self, high_accuracy: bool = True) -> Coordinate:
        return _coordinate_or_error(self._latitude, self._longitude, "static position")


class IPLocationService:
    """
    Approximate position from the public IP address.

    The endpoint must answer with a JSON object holding the latitude and
    longitude under ``lat_key`` / ``lon_key``. IP lookups are city-level at
    best, so ``high_accuracy`` cannot be honoured and is only logged.
    """

    def __init__(
        self,
        endpoint: str = DEFAULT_IP_ENDPOINT,
        *,
        lat_key: str = "latitude",
        lon_key: str = "longitude",
        timeout: float = IP_LOOKUP_TIMEOUT_S,
    ):
        self.endpoint = endpoint
        self.lat_key = lat_key
        self.lon_key = lon_key
        self.timeout = timeout

    def get_current_position(self, high_accuracy: bool = True) -> Coordinate:
        if high_accuracy:
            logger.debug("High accuracy requested; IP lookup at %s is approximate", self.endpoint)
        try:
            r = requests.get(self.endpoint, timeout=self.timeout)
            r.raise_for_status()
        except requests.RequestException as e:
            raise _position_error_from_request(e) from e

        try:
            data = r.json()
        except ValueError as e:
            raise PositionError(PositionErrorReason.POSITION_UNAVAILABLE, "response is not JSON") from e
        if not isinstance(data, dict):
            raise PositionError(PositionErrorReason.POSITION_UNAVAILABLE, "unexpected response shape")
        if data.get("error"):
            raise PositionError(PositionErrorReason.POSITION_UNAVAILABLE, str(data.get("reason", "lookup failed")))

        return _coordinate_or_error(data.get(self.lat_key), data.get(self.lon_key), self.endpoint)


class AddressLocationService:
    """Position of a typed address, resolved through Nominatim."""

    def __init__(self, address: str):
        self.address = address

    def get_current_position(self, high_accuracy: bool = True) -> Coordinate:
        try:
            result = geocode_address(self.address)
        except requests.RequestException as e:
            raise _position_error_from_request(e) from e
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise PositionError(PositionErrorReason.POSITION_UNAVAILABLE, "malformed geocoder response") from e

        if result is None:
            raise PositionError(PositionErrorReason.POSITION_UNAVAILABLE, f"address not found: {self.address!r}")
        logger.info("Resolved %r to %s", self.address, result.get("display_name"))
        return _coordinate_or_error(result["lat"], result["lon"], "geocoder")


def acquire_position(service: Optional[LocationService], *, high_accuracy: bool = True) -> Coordinate:
    """
    Request a single current position.

    Raises
    ------
    PositionError
        With reason UNSUPPORTED when no service is available, otherwise
        whatever the service reports. Any other failure inside the service
        is reported as POSITION_UNAVAILABLE. Never retried.
    """
    if service is None:
        raise PositionError(PositionErrorReason.UNSUPPORTED)
    try:
        position = service.get_current_position(high_accuracy=high_accuracy)
    except PositionError:
        raise
    except Exception as e:
        logger.exception("Location service %s failed", type(service).__name__)
        raise PositionError(PositionErrorReason.POSITION_UNAVAILABLE, str(e)) from e
    logger.info("Acquired position (%.6f, %.6f)", position.latitude, position.longitude)
    return position

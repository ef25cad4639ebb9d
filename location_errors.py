"""
location_errors.py
------------------
Exception hierarchy for the nearest facility finder.

Only dataset-level and position-level failures are errors. Row-level data
defects (missing coordinates, missing display fields) are handled by the
parser without raising.
"""

from enum import Enum


class NearestFinderError(Exception):
    """Base exception for all nearest-finder errors."""


class PositionErrorReason(Enum):
    PERMISSION_DENIED = "PermissionDenied"
    SERVICE_UNAVAILABLE = "ServiceUnavailable"
    POSITION_UNAVAILABLE = "PositionUnavailable"
    TIMEOUT = "Timeout"
    UNSUPPORTED = "Unsupported"


_POSITION_MESSAGES = {
    PositionErrorReason.PERMISSION_DENIED: "User denied the request for location",
    PositionErrorReason.SERVICE_UNAVAILABLE: "Location service is unavailable",
    PositionErrorReason.POSITION_UNAVAILABLE: "Location information is unavailable",
    PositionErrorReason.TIMEOUT: "The request to get the location timed out",
    PositionErrorReason.UNSUPPORTED: "Geolocation is not supported by this host",
}


class PositionError(NearestFinderError):
    """The current position could not be acquired."""

    def __init__(self, reason: PositionErrorReason, detail: str = ""):
        self.reason = reason
        self.detail = detail
        message = f"Error getting location: {_POSITION_MESSAGES[reason]}"
        if detail:
            message += f" ({detail})"
        super().__init__(message)

    @property
    def code(self) -> str:
        """Short state label, e.g. ``PositionError:PermissionDenied``."""
        return f"PositionError:{self.reason.value}"


class DatasetError(NearestFinderError):
    """Base class for dataset-level failures."""

    def __init__(self, source: str, detail: str):
        self.source = source
        self.detail = detail
        super().__init__(f"{self._prefix} {source}: {detail}")

    _prefix = "Dataset error for"


class DatasetLoadError(DatasetError):
    """The dataset text could not be fetched."""

    _prefix = "Error loading locations data from"


class DatasetParseError(DatasetError):
    """The dataset text is not parseable as CSV."""

    _prefix = "Error parsing CSV from"

"""Typed records shared by the parser, selector and presenter."""

import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import List, Mapping, Optional, Tuple


@dataclass(frozen=True)
class Coordinate:
    """A WGS84 position in decimal degrees."""

    latitude: float
    longitude: float

    def __post_init__(self):
        lat, lon = float(self.latitude), float(self.longitude)
        if not (math.isfinite(lat) and math.isfinite(lon)):
            raise ValueError(f"Coordinate must be finite, got ({lat}, {lon})")
        if not -90.0 <= lat <= 90.0:
            raise ValueError(f"Latitude out of range [-90, 90]: {lat}")
        if not -180.0 <= lon <= 180.0:
            raise ValueError(f"Longitude out of range [-180, 180]: {lon}")
        object.__setattr__(self, "latitude", lat)
        object.__setattr__(self, "longitude", lon)


@dataclass(frozen=True)
class LocationRecord:
    """One dataset row with valid coordinates and its display attributes."""

    coordinate: Coordinate
    attributes: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "attributes", MappingProxyType(dict(self.attributes)))

    def __hash__(self):
        return hash((self.coordinate, frozenset(self.attributes.items())))

    @property
    def latitude(self) -> float:
        return self.coordinate.latitude

    @property
    def longitude(self) -> float:
        return self.coordinate.longitude

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.attributes.get(name, default)

    def to_dict(self) -> dict:
        out = dict(self.attributes)
        out["latitude"] = self.latitude
        out["longitude"] = self.longitude
        return out


@dataclass(frozen=True)
class RankedRecord:
    """A LocationRecord annotated with its distance from the user."""

    record: LocationRecord
    distance_km: float

    @property
    def coordinate(self) -> Coordinate:
        return self.record.coordinate

    def to_dict(self) -> dict:
        out = self.record.to_dict()
        out["distance_km"] = self.distance_km
        return out


Dataset = Tuple[LocationRecord, ...]


@dataclass(frozen=True)
class PresenterView:
    """Everything a presenter needs for one render cycle."""

    loading: bool
    error: Optional[str]
    user_position: Optional[Coordinate]
    results: List[RankedRecord]

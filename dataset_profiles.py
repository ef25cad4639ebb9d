"""
dataset_profiles.py
-------------------
Per-dataset configuration: which CSV headers feed which field, the
placeholder used when a display field is empty, how many results to show
and where the CSV lives by default.

The same semantic field has been spelled differently across datasets
(e.g. "Contact Number" vs "Mobile Number"), so every field carries an
ordered tuple of acceptable headers; the first one present wins.
Header matching is exact: case and whitespace matter.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Tuple

__all__ = [
    "NOT_AVAILABLE",
    "DATA_DIR",
    "FieldSpec",
    "DatasetProfile",
    "PROFILES",
    "get_profile",
]

NOT_AVAILABLE = "Not Available"

HERE = Path(__file__).resolve().parent
DATA_DIR = Path(os.environ.get("NEAREST_FINDER_DATA_DIR", HERE / "datasets"))


@dataclass(frozen=True)
class FieldSpec:
    name: str
    aliases: Tuple[str, ...]
    sentinel: str = NOT_AVAILABLE


@dataclass(frozen=True)
class DatasetProfile:
    name: str
    title: str
    latitude: Tuple[str, ...]
    longitude: Tuple[str, ...]
    fields: Tuple[FieldSpec, ...]
    default_source: str
    k: int = 1


LOCATIONS = DatasetProfile(
    name="locations",
    title="Nearest Location",
    latitude=("latitude",),
    longitude=("longitude",),
    fields=(FieldSpec("name", ("name",), sentinel="Unnamed Location"),),
    default_source=str(DATA_DIR / "locations.csv"),
)

HOSPITAL = DatasetProfile(
    name="hospital",
    title="Nearest Hospital",
    latitude=("LATITUDE", "Latitude", "latitude"),
    longitude=("LONGITUDE", "Longitude", "longitude"),
    fields=(
        FieldSpec("name", ("Hospital Name", "Hospital_Name", "FACNAME", "Name")),
        FieldSpec("address", ("Address", "Location", "ADDRESS")),
        FieldSpec("postal_code", ("Pincode", "Postal Code", "ZIP Code")),
        FieldSpec("phone", ("Telephone", "Contact Number", "Mobile Number", "CONTACT_PHONE_NUMBER")),
        FieldSpec("fax", ("Fax", "Fax Number")),
    ),
    default_source=str(DATA_DIR / "hospitals.csv"),
)

BLOOD_BANK = DatasetProfile(
    name="bloodbank",
    title="Nearest Blood Banks",
    latitude=("LATITUDE",),
    longitude=("LONGITUDE",),
    fields=(
        FieldSpec("name", ("Blood Bank Name",)),
        FieldSpec("address", ("Address",)),
        FieldSpec("postal_code", ("Pincode",)),
        FieldSpec("phone", ("Contact No", "Mobile")),
    ),
    default_source=str(DATA_DIR / "bloodbank.csv"),
    k=3,
)

PROFILES: Dict[str, DatasetProfile] = {p.name: p for p in (LOCATIONS, HOSPITAL, BLOOD_BANK)}


def get_profile(name: str) -> DatasetProfile:
    try:
        return PROFILES[name]
    except KeyError:
        raise ValueError(f"Unknown dataset profile '{name}'. Choose from: {sorted(PROFILES)}") from None

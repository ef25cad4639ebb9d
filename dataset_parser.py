"""
dataset_parser.py
-----------------
Turn raw CSV text into an ordered Dataset of LocationRecord.

Data assumptions
- The text has a header row. Which headers hold latitude, longitude and the
  display fields is described by a DatasetProfile (see dataset_profiles.py).
- Lat/Lon are WGS84 coordinates (decimal degrees).

Rows whose latitude or longitude is missing or not a finite number are
dropped without raising. Empty display fields are replaced by the field's
sentinel (usually "Not Available"). Row order is kept.

Usage
-----
from dataset_parser import load_dataset
from dataset_profiles import get_profile

dataset = load_dataset("datasets/bloodbank.csv", get_profile("bloodbank"))
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Optional, Sequence

import numpy as np
import pandas as pd
import requests

from dataset_profiles import DatasetProfile
from location_errors import DatasetLoadError, DatasetParseError
from location_models import Coordinate, Dataset, LocationRecord

__all__ = ["fetch_dataset_text", "parse_dataset", "load_dataset"]

logger = logging.getLogger(__name__)

FETCH_TIMEOUT_S = 30


# -------------------------
# Fetching
# -------------------------

def _is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def fetch_dataset_text(source: str | Path) -> str:
    """Return the raw CSV text from a local path or an http(s) URL."""
    source = str(source)
    if _is_url(source):
        try:
            r = requests.get(source, timeout=FETCH_TIMEOUT_S)
            r.raise_for_status()
        except requests.RequestException as e:
            raise DatasetLoadError(source, str(e)) from e
        return r.text

    path = Path(source)
    if not path.is_file():
        raise DatasetLoadError(source, "CSV not found")
    try:
        return path.read_text(encoding="utf-8-sig")
    except UnicodeDecodeError as e:
        raise DatasetParseError(source, f"not valid UTF-8 text ({e.reason})") from e
    except OSError as e:
        raise DatasetLoadError(source, str(e)) from e


# -------------------------
# Parsing
# -------------------------

def _pick_column(columns: Sequence[str], candidates: Sequence[str]) -> Optional[str]:
    present = set(columns)
    for cand in candidates:
        if cand in present:
            return cand
    return None


def _to_float(df: pd.DataFrame, col: Optional[str]) -> np.ndarray:
    if col is None:
        return np.full(len(df), np.nan)
    return pd.to_numeric(df[col].str.strip(), errors="coerce").to_numpy(dtype=float, na_value=np.nan)


def _display_value(value, sentinel: str) -> str:
    if value is None or pd.isna(value):
        return sentinel
    value = str(value)
    return value if value.strip() else sentinel


def _read_frame(text: str, source: str) -> pd.DataFrame:
    try:
        return pd.read_csv(io.StringIO(text), dtype=str, keep_default_na=False, index_col=False)
    except pd.errors.EmptyDataError as e:
        raise DatasetParseError(source, "no header row found") from e
    except pd.errors.ParserError as e:
        raise DatasetParseError(source, str(e).strip()) from e


def parse_dataset(text: str, profile: DatasetProfile, *, source: str = "<text>") -> Dataset:
    """
    Parse CSV text into a Dataset for the given profile.

    Raises
    ------
    DatasetParseError
        If the text is not parseable as CSV.
    """
    df = _read_frame(text, source)
    columns = list(df.columns)

    lat_col = _pick_column(columns, profile.latitude)
    lon_col = _pick_column(columns, profile.longitude)
    if lat_col is None or lon_col is None:
        logger.warning(
            "%s: no latitude/longitude column (tried %s / %s); every row will be dropped",
            source, profile.latitude, profile.longitude,
        )

    field_cols = [(spec, _pick_column(columns, spec.aliases)) for spec in profile.fields]

    lats = _to_float(df, lat_col)
    lons = _to_float(df, lon_col)
    keep = np.isfinite(lats) & np.isfinite(lons)

    records = []
    for pos, row_ok in enumerate(keep):
        if not row_ok:
            continue
        try:
            coordinate = Coordinate(lats[pos], lons[pos])
        except ValueError as e:
            logger.debug("%s: dropping row %d: %s", source, pos + 1, e)
            continue

        attributes = {}
        for spec, col in field_cols:
            value = df[col].iat[pos] if col is not None else None
            attributes[spec.name] = _display_value(value, spec.sentinel)
        records.append(LocationRecord(coordinate, attributes))

    dropped = len(df) - len(records)
    if dropped:
        logger.debug("%s: dropped %d of %d rows without usable coordinates", source, dropped, len(df))
    logger.info("%s: loaded %d %s records", source, len(records), profile.name)
    return tuple(records)


def load_dataset(source: str | Path, profile: DatasetProfile) -> Dataset:
    """
    Fetch and parse one dataset.

    Raises
    ------
    DatasetLoadError
        If the text cannot be fetched.
    DatasetParseError
        If the text is not parseable as CSV.
    """
    text = fetch_dataset_text(source)
    return parse_dataset(text, profile, source=str(source))

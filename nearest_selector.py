"""
nearest_selector.py
-------------------
Rank dataset records by great-circle distance from a position.

Every record is measured (plain linear scan, datasets hold at most a few
thousand rows). Records at equal distance keep their dataset order.

Usage
-----
from nearest_selector import select_nearest

top3 = select_nearest(position, dataset, 3)
print(top3[0].record.get("name"), top3[0].distance_km, "km away")
"""

from typing import List, Optional, Sequence

from distance import haversine_km
from location_models import Coordinate, LocationRecord, RankedRecord

__all__ = ["select_nearest", "select_one"]


def select_nearest(position: Coordinate, dataset: Sequence[LocationRecord], k: int) -> List[RankedRecord]:
    """Return the ``min(k, len(dataset))`` nearest records, closest first."""
    if k < 0:
        raise ValueError(f"k must be non-negative, got {k}")

    ranked = [RankedRecord(record, haversine_km(position, record.coordinate)) for record in dataset]
    # sorted() is stable, so ties stay in dataset order
    ranked = sorted(ranked, key=lambda r: r.distance_km)
    return ranked[:k]


def select_one(position: Coordinate, dataset: Sequence[LocationRecord]) -> Optional[RankedRecord]:
    nearest = select_nearest(position, dataset, 1)
    return nearest[0] if nearest else None

"""
In-memory index over the reference cities table.
"""
from typing import Dict, Iterable, List, Optional, Tuple

import pandas as pd
from loguru import logger

from location_linker.matchers.blocking import is_us
from location_linker.models import CityRecord


class Cities:
    """
    Read-only lookups over the reference cities.

    Exact keys use the city's display name (city, else region). When two rows
    share a key the first one loaded wins; list lookups keep load order.
    """

    def __init__(self, records: Iterable[CityRecord]):
        self._records: List[CityRecord] = []
        self._by_city_state: Dict[Tuple[str, str], CityRecord] = {}
        self._by_city_country: Dict[Tuple[str, str], CityRecord] = {}
        self._by_state: Dict[str, List[CityRecord]] = {}
        self._by_country: Dict[str, List[CityRecord]] = {}
        self._by_id: Dict[int, CityRecord] = {}

        for rec in records:
            self._records.append(rec)
            if rec.city_id is not None:
                self._by_id.setdefault(rec.city_id, rec)

            name = rec.display_name
            if rec.country is not None:
                self._by_country.setdefault(rec.country, []).append(rec)
                if name is not None:
                    self._by_city_country.setdefault((name, rec.country), rec)

            if is_us(rec.country) and rec.state is not None:
                self._by_state.setdefault(rec.state, []).append(rec)
                if name is not None:
                    self._by_city_state.setdefault((name, rec.state), rec)

    def __len__(self) -> int:
        return len(self._records)

    def size(self) -> int:
        return len(self._records)

    def get_by_id(self, city_id) -> Optional[CityRecord]:
        return self._by_id.get(city_id)

    def get_city_in_state(self, city: Optional[str], state: Optional[str]) -> Optional[CityRecord]:
        """Exact (city, state) lookup among US cities."""
        if city is None or state is None:
            return None
        return self._by_city_state.get((city, state))

    def get_city_in_country(self, city: Optional[str], country: Optional[str]) -> Optional[CityRecord]:
        """Exact (city, country) lookup."""
        if city is None or country is None:
            return None
        return self._by_city_country.get((city, country))

    def get_state(self, state: Optional[str]) -> Optional[List[CityRecord]]:
        """All US cities in `state`, or None if the state is unknown."""
        if state is None:
            return None
        return self._by_state.get(state)

    def get_country(self, country: Optional[str]) -> Optional[List[CityRecord]]:
        """All cities in `country`, or None if the country is unknown."""
        if country is None:
            return None
        return self._by_country.get(country)


def load_cities_from_csv(file_path: str) -> Cities:
    """Load the reference cities table from CSV into a `Cities` index."""
    # Only empty cells are missing; "NA" is Namibia
    df = pd.read_csv(
        file_path,
        dtype={"state": str, "country": str, "city": str, "region": str},
        keep_default_na=False,
        na_values=[""],
    )

    def safe_get(row, col):
        # Missing columns and NaN both become None
        if col not in row.index:
            return None
        val = row[col]
        if pd.isna(val):
            return None
        return val

    records = []
    for _, row in df.iterrows():
        city_id = safe_get(row, "id")
        lat = safe_get(row, "latitude")
        lon = safe_get(row, "longitude")
        records.append(CityRecord(
            city_id=int(city_id) if city_id is not None else None,
            city=safe_get(row, "city"),
            region=safe_get(row, "region"),
            state=safe_get(row, "state"),
            country=safe_get(row, "country"),
            latitude=float(lat) if lat is not None else None,
            longitude=float(lon) if lon is not None else None,
        ))

    cities = Cities(records)
    logger.debug(f"Loaded {len(cities)} reference cities from {file_path}")
    return cities

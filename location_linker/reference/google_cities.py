"""
The google_cities table: cleaned, concatenated location strings that were
previously geocoded, each resolved to a reference city.
"""
from typing import Dict, Iterable, Optional, Tuple

import pandas as pd
from loguru import logger

from location_linker.models import GoogleCityRecord
from location_linker.reference.cities import Cities


class GoogleCities:
    """
    Exact-match table keyed by cleaned location string.

    Rows below `confidence_threshold`, or pointing at a city id the reference
    table does not know, are dropped while building.
    """

    def __init__(
        self,
        rows: Iterable[Tuple[str, int, float]],
        cities: Cities,
        confidence_threshold: float,
    ):
        self._table: Dict[str, GoogleCityRecord] = {}
        dropped = 0

        for cleaned_location, city_id, confidence in rows:
            if cleaned_location is None or confidence is None or confidence < confidence_threshold:
                dropped += 1
                continue
            city = cities.get_by_id(city_id)
            if city is None:
                dropped += 1
                continue
            self._table.setdefault(
                cleaned_location,
                GoogleCityRecord(cleaned_location=cleaned_location, city=city, confidence=confidence),
            )

        if dropped:
            logger.debug(f"Dropped {dropped} google_cities rows (low confidence or unknown city)")

    def __contains__(self, cleaned_location) -> bool:
        return cleaned_location in self._table

    def __len__(self) -> int:
        return len(self._table)

    def size(self) -> int:
        return len(self._table)

    def get(self, cleaned_location: str) -> Optional[GoogleCityRecord]:
        return self._table.get(cleaned_location)


def load_google_cities_from_csv(
    file_path: str,
    cities: Cities,
    confidence_threshold: float,
) -> GoogleCities:
    """
    Load the google_cities table from CSV.

    Expects columns `cleaned_location`, `city_id` and `confidence`.
    """
    df = pd.read_csv(file_path, dtype={"cleaned_location": str}, keep_default_na=False, na_values=[""])
    df = df.dropna(subset=["cleaned_location", "city_id", "confidence"])

    rows = (
        (row.cleaned_location, int(row.city_id), float(row.confidence))
        for row in df.itertuples(index=False)
    )
    goog = GoogleCities(rows, cities, confidence_threshold)
    logger.debug(f"Loaded {len(goog)} google_cities entries from {file_path}")
    return goog

import os
import csv
import time
import sys
from collections import Counter
from typing import List
import pandas as pd
from loguru import logger

from location_linker.models import RawLocation
from location_linker.disambiguator import disambiguate, normalize_inventors
from location_linker.reference import load_cities_from_csv, load_google_cities_from_csv
from location_linker.config import (
    CITIES_CSV,
    GOOGLE_CITIES_CSV,
    RAW_LOCATIONS_CSV,
    OUTPUT_CSV,
    MATCH_THRESHOLD,
    GOOGLE_CONFIDENCE_THRESHOLD,
    CONCURRENCY,
    LOG_LEVEL,
)

RAW_COLUMNS = {
    "id": "id",
    "inventor_id": "inventor_id",
    "raw_city": "raw_city_text",
    "cleaned_location": "cleaned_location",
    "city": "city",
    "state": "state",
    "country": "country",
    "cleaned_country": "cleaned_country",
}


def load_raw_locations_from_csv(file_path: str, nrows: int = None) -> List[RawLocation]:
    """Load raw locations from CSV and convert to RawLocation objects."""
    df = pd.read_csv(file_path, nrows=nrows, dtype=str, keep_default_na=False, na_values=[""])
    records = []
    for _, row in df.iterrows():
        # Helper to safely extract values from pandas Series, converting NaN to None
        def safe_get(col):
            if col not in row.index:
                return None
            val = row[col]
            if pd.isna(val):
                return None
            return val

        record = RawLocation(**{field: safe_get(col) for col, field in RAW_COLUMNS.items()})
        records.append(record)
    return records


def write_results_csv(records: List[RawLocation], output_path: str) -> None:
    """Write one row per raw location with its linked city and link code."""
    with open(output_path, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(["id", "raw_city", "city_id", "link_code", "linked_city"])
        for loc in records:
            city = loc.linked_city
            writer.writerow([
                loc.id,
                loc.raw_city_text,
                city.city_id if city is not None else None,
                int(loc.link_code) if loc.link_code is not None else None,
                city.string_value if city is not None else None,
            ])


def log_progress(stage: str, identified: int, total: int) -> None:
    logger.info(f"{stage}: {identified} of {total} locations identified")


def run() -> List[RawLocation]:
    """
    Run the full batch.

    - Loads the reference tables and the raw locations.
    - Links raw locations to cities, then consolidates each inventor's US cities.
    - Writes the results to the output CSV.
    """
    start = time.perf_counter()

    logger.info("Loading cities table...")
    cities = load_cities_from_csv(CITIES_CSV)
    logger.info(f"Got {len(cities)} cities")

    logger.info("Loading google_cities table...")
    goog = load_google_cities_from_csv(GOOGLE_CITIES_CSV, cities, GOOGLE_CONFIDENCE_THRESHOLD)
    logger.info(f"Got {len(goog)} google cities")

    records = load_raw_locations_from_csv(RAW_LOCATIONS_CSV)
    logger.info(f"Got {len(records)} raw locations")

    disambiguate(
        cities,
        goog,
        records,
        MATCH_THRESHOLD,
        progress=log_progress,
        max_workers=CONCURRENCY,
    )

    stats = normalize_inventors(records)
    logger.info(
        f"Normalized {stats.inventors} inventors: {stats.relinked} locations relinked, "
        f"{len(stats.skipped_inventors)} inventors skipped as ambiguous"
    )

    if os.path.exists(OUTPUT_CSV):
        os.remove(OUTPUT_CSV)
    write_results_csv(records, OUTPUT_CSV)

    codes = Counter(loc.link_code.name for loc in records if loc.link_code is not None)
    for code, count in sorted(codes.items()):
        logger.info(f"{code}: {count}")
    logger.info(
        f"Linked {sum(codes.values())} of {len(records)} locations "
        f"in {time.perf_counter() - start:.1f}s"
    )
    return records


def main():
    # Initialize logs
    logger.remove()  # Remove default handler
    logger.add(sys.stderr, level=LOG_LEVEL, format="<green>{time:HH:mm:ss}</green> | <level>{message}</level>")

    run()


if __name__ == "__main__":
    main()

# location_linker/disambiguator.py

from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple
from loguru import logger

from location_linker.config import CONCURRENCY
from location_linker.models import CityRecord, LinkCode, NormalizeStats, RawLocation
from location_linker.matchers.blocking import country_group, is_us, split_group
from location_linker.matchers.fuzzy_matcher import best_match
from location_linker.reference.cities import Cities
from location_linker.reference.google_cities import GoogleCities

# Called as progress(stage, identified, total) after each pass
ProgressCallback = Callable[[str, int, int], None]


class AmbiguousConsolidationError(ValueError):
    """A city name is linked the same number of times in two US states."""

    def __init__(self, city_name: str, cities: Sequence[CityRecord]):
        self.city_name = city_name
        self.cities = list(cities)
        states = ", ".join(c.state or "?" for c in self.cities)
        super().__init__(f"City '{city_name}' appears the same number of times in states: {states}")


def _link(loc: RawLocation, city: CityRecord, code: LinkCode) -> None:
    loc.linked_city = city
    loc.link_code = code


def _chunks(records: List[RawLocation], n_chunks: int):
    """Yield disjoint slices of `records`, roughly `n_chunks` of them."""
    size = max(1, -(-len(records) // max(n_chunks, 1)))
    for i in range(0, len(records), size):
        yield records[i:i + size]


def _run_parallel(fn: Callable, jobs: Iterable, max_workers: int) -> None:
    """Run `fn` on every job; exceptions from workers propagate to the caller."""
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = [executor.submit(fn, job) for job in jobs]
        for future in as_completed(futures):
            future.result()


def _unlinked(records: Iterable[RawLocation]) -> List[RawLocation]:
    return [loc for loc in records if loc.linked_city is None]


def disambiguate(
    cities: Cities,
    google_cities: GoogleCities,
    records: List[RawLocation],
    match_threshold: float,
    progress: Optional[ProgressCallback] = None,
    max_workers: int = CONCURRENCY,
) -> None:
    """
    Link raw locations to reference cities, in place.

    Three passes run in order, each one only over records the previous
    passes left unlinked:
      1. exact lookup of the cleaned location string in the google table (GOOGLE_EXACT)
      2. exact city/state for US records (EXACT_CITY), city/country otherwise (FUZZY_CITY)
      3. Jaro-Winkler match blocked by US state or by country (FUZZY_CITY)

    Args:
        cities (Cities): Reference cities.
        google_cities (GoogleCities): Confidence-filtered google_cities table.
        records (List[RawLocation]): Raw locations to link. Mutated in place.
        match_threshold (float): Fuzzy scores must be strictly above this to be accepted.
        progress (Optional[ProgressCallback]): Called after each pass with
            (stage, identified count, total count).
        max_workers (int): Worker threads used by each pass.
    """
    if not 0.0 < match_threshold < 1.0:
        raise ValueError(f"match_threshold must be in (0, 1), got {match_threshold}")
    if max_workers < 1:
        raise ValueError(f"max_workers must be at least 1, got {max_workers}")

    total = len(records)

    def report(stage: str, remaining: List[RawLocation]) -> None:
        identified = total - len(remaining)
        logger.debug(f"{stage}: {identified}/{total} locations identified")
        if progress is not None:
            progress(stage, identified, total)

    # 1) Google lookup on the cleaned, concatenated location
    def google_lookup(chunk: List[RawLocation]) -> None:
        for loc in chunk:
            if loc.linked_city is not None or loc.cleaned_location is None:
                continue
            entry = google_cities.get(loc.cleaned_location)
            if entry is not None:
                _link(loc, entry.city, LinkCode.GOOGLE_EXACT)

    _run_parallel(google_lookup, _chunks(records, max_workers), max_workers)
    remaining = _unlinked(records)
    report("google", remaining)

    # 2) Exact match on city/state (US) or city/country (everywhere else)
    def exact_lookup(chunk: List[RawLocation]) -> None:
        for loc in chunk:
            if is_us(loc.country):
                city = cities.get_city_in_state(loc.city, loc.state)
                if city is not None:
                    _link(loc, city, LinkCode.EXACT_CITY)
            else:
                # Non-US exact hits are tagged at fuzzy confidence
                city = cities.get_city_in_country(loc.city, loc.country)
                if city is not None:
                    _link(loc, city, LinkCode.FUZZY_CITY)

    _run_parallel(exact_lookup, _chunks(remaining, max_workers), max_workers)
    remaining = _unlinked(remaining)
    report("exact", remaining)

    # 3) Fuzzy match, blocked by state (US) or country, once per unique raw city
    grouped: Dict[str, Dict[str, List[RawLocation]]] = {}
    for loc in remaining:
        key = country_group(loc)
        if key is None or not loc.city:
            continue
        grouped.setdefault(key, {}).setdefault(loc.city, []).append(loc)

    jobs: List[Tuple[str, str, List[RawLocation], List[CityRecord]]] = []
    for key, raw_cities in grouped.items():
        block, is_state = split_group(key)
        city_list = cities.get_state(block) if is_state else cities.get_country(block)
        n_locs = sum(len(locs) for locs in raw_cities.values())
        logger.debug(
            f"Missing for: {key} ({n_locs} locations, {len(raw_cities)} unique, "
            f"{len(city_list) if city_list else 0} known cities)"
        )
        if not city_list:
            continue
        for raw_city, locs in raw_cities.items():
            jobs.append((key, raw_city, locs, city_list))

    def fuzzy_lookup(job: Tuple[str, str, List[RawLocation], List[CityRecord]]) -> None:
        key, raw_city, locs, city_list = job
        match = best_match(raw_city, city_list)
        if match.city is None or match.score <= match_threshold:
            return
        # Guard against the block key itself matching, e.g. a country-named row
        if match.city.string_value == key:
            return
        for loc in locs:
            _link(loc, match.city, LinkCode.FUZZY_CITY)

    _run_parallel(fuzzy_lookup, jobs, max_workers)
    remaining = _unlinked(remaining)
    report("fuzzy", remaining)


def normalize_inventor(records: List[RawLocation]) -> int:
    """
    Consolidate the US cities linked for one inventor.

    When the same city name was linked in several US states, every record is
    re-pointed to the state with the most linked records. Link codes are kept.
    All city names are checked before anything is rewritten, so a tie leaves
    `records` untouched.

    Args:
        records (List[RawLocation]): Raw locations belonging to a single inventor.

    Returns:
        int: Number of records re-pointed to another city.

    Raises:
        AmbiguousConsolidationError: If the top two states for a city name tie.
    """
    by_city: Dict[CityRecord, List[RawLocation]] = {}
    for loc in records:
        if loc.linked_city is not None and is_us(loc.linked_city.country):
            by_city.setdefault(loc.linked_city, []).append(loc)

    by_name: Dict[str, List[CityRecord]] = {}
    for city in by_city:
        if city.city is None:
            continue
        by_name.setdefault(city.city, []).append(city)

    relinks: List[Tuple[CityRecord, List[CityRecord]]] = []
    for name, states in by_name.items():
        if len(states) < 2:
            continue
        ranked = sorted(states, key=lambda c: len(by_city[c]), reverse=True)
        first, second = ranked[0], ranked[1]
        if len(by_city[first]) == len(by_city[second]):
            raise AmbiguousConsolidationError(name, [first, second])
        relinks.append((first, ranked[1:]))

    relinked = 0
    for top, others in relinks:
        for city in others:
            for loc in by_city[city]:
                loc.linked_city = top
                relinked += 1
    return relinked


def normalize_inventors(records: List[RawLocation]) -> NormalizeStats:
    """
    Run `normalize_inventor` over each inventor's records.

    Records without an inventor id are left alone. An inventor whose cities
    tie is logged and skipped; their records keep their current links.
    """
    by_inventor: Dict[str, List[RawLocation]] = {}
    for loc in records:
        if loc.inventor_id is not None:
            by_inventor.setdefault(loc.inventor_id, []).append(loc)

    stats = NormalizeStats(inventors=len(by_inventor))
    for inventor_id, locs in by_inventor.items():
        try:
            stats.relinked += normalize_inventor(locs)
        except AmbiguousConsolidationError as e:
            logger.warning(f"Skipping inventor {inventor_id}: {e}")
            stats.skipped_inventors.append(inventor_id)
    return stats

from rapidfuzz.distance import JaroWinkler
from typing import List, Optional
from location_linker.models import CityRecord, MatchCandidate

# Applied when a city row has no name and we compare against its region instead
REGION_PENALTY = -0.05

NO_MATCH = MatchCandidate(city=None, score=-1.0)


def score(raw: str, city: CityRecord) -> MatchCandidate:
    """
    Compare a raw city name to one reference city.

    The comparison uses the city's "city" field, falling back on "region" when
    that is unset. Region comparisons are slightly penalized so true city names
    win over administrative areas with the same name.

    Args:
        raw (str): Raw city name.
        city (CityRecord): Reference city to compare against.

    Returns:
        MatchCandidate: The city and its Jaro-Winkler similarity plus any penalty.
    """
    target = city.city
    adjust = 0.0

    if target is None:
        target = city.region or ""
        adjust = REGION_PENALTY

    similarity = JaroWinkler.similarity(raw, target)
    return MatchCandidate(city=city, score=similarity + adjust)


def best_match(raw: str, candidates: Optional[List[CityRecord]]) -> MatchCandidate:
    """
    Find the best-scoring reference city for a raw city name.

    Args:
        raw (str): Raw city name.
        candidates (Optional[List[CityRecord]]): Cities to compare against.

    Returns:
        MatchCandidate: Highest-scoring candidate (first one wins on ties), or
                        a sentinel with no city and score -1 when there are no candidates.
    """
    if not candidates:
        return NO_MATCH

    best = NO_MATCH
    for city in candidates:
        # Rows with neither a city nor a region name cannot be compared
        if not city.display_name:
            continue
        cand = score(raw, city)
        if best.city is None or cand.score > best.score:
            best = cand
    return best

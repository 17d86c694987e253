"""
Typed data models for the location linking pipeline.
All data structures used throughout the codebase should be defined here.
"""
from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Optional


class LinkCode(IntEnum):
    """How a raw location was linked, ordered by descending confidence."""
    GOOGLE_EXACT = 1  # Exact match of the cleaned location string in the google table
    EXACT_CITY = 2  # Exact match on city/state (US)
    FUZZY_CITY = 3  # Fuzzy match within a state/country block, or exact city/country (non-US)


@dataclass(frozen=True)
class CityRecord:
    """Canonical city from the reference cities table."""
    city_id: Optional[int] = None
    city: Optional[str] = None
    region: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    @property
    def display_name(self) -> Optional[str]:
        """City name, falling back on the region for region-only rows."""
        return self.city if self.city is not None else self.region

    @property
    def string_value(self) -> str:
        parts = [self.display_name, self.state, self.country]
        return ", ".join(p for p in parts if p)


@dataclass
class RawLocation:
    """Input location occurrence, already cleaned upstream."""
    raw_city_text: Optional[str] = None
    cleaned_location: Optional[str] = None  # Normalized concatenation used for the google lookup
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    cleaned_country: Optional[str] = None
    id: Optional[str] = None
    inventor_id: Optional[str] = None
    # Filled by the disambiguator
    linked_city: Optional[CityRecord] = None
    link_code: Optional[LinkCode] = None

    @property
    def is_linked(self) -> bool:
        return self.linked_city is not None


@dataclass(frozen=True)
class MatchCandidate:
    """A reference city paired with its similarity score for one raw string."""
    city: Optional[CityRecord]
    score: float


@dataclass(frozen=True)
class GoogleCityRecord:
    """Row of the google_cities table: a cleaned location string resolved to a city."""
    cleaned_location: str
    city: CityRecord
    confidence: float


@dataclass
class NormalizeStats:
    """Outcome of consolidating linked cities across inventors."""
    inventors: int = 0
    relinked: int = 0
    skipped_inventors: List[str] = field(default_factory=list)  # Ambiguous ties left as linked

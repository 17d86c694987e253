from typing import Optional, Tuple
from location_linker.models import RawLocation

US_GROUP_PREFIX = "US:"


def is_us(country: Optional[str]) -> bool:
    return country is not None and country.upper() == "US"


def country_group(loc: RawLocation) -> Optional[str]:
    """
    Blocking key for a raw location.

    US locations are blocked by state (the US reference set is too large to
    block by country), encoded as a pseudo-country "US:<state>". Everything
    else is blocked by its cleaned country.

    Args:
        loc (RawLocation): Raw location record.

    Returns:
        Optional[str]: Group key, or None when the record lacks the fields to block on.
    """
    country = loc.cleaned_country
    if not country:
        return None
    if is_us(country):
        if not loc.state:
            return None
        return f"{US_GROUP_PREFIX}{loc.state}"
    return country


def split_group(key: str) -> Tuple[str, bool]:
    """
    Undo `country_group`: returns (state, True) for a US state key and
    (country, False) otherwise.
    """
    if key.startswith(US_GROUP_PREFIX):
        return key[len(US_GROUP_PREFIX):], True
    return key, False

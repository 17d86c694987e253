"""City name scoring and blocking."""
from location_linker.matchers.fuzzy_matcher import best_match, score
from location_linker.matchers.blocking import country_group, is_us, split_group

__all__ = ["best_match", "score", "country_group", "is_us", "split_group"]

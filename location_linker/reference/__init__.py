"""Reference tables loaded before disambiguation."""
from location_linker.reference.cities import Cities, load_cities_from_csv
from location_linker.reference.google_cities import GoogleCities, load_google_cities_from_csv

__all__ = ["Cities", "GoogleCities", "load_cities_from_csv", "load_google_cities_from_csv"]

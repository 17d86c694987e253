# location_linker/config.py
from dotenv import load_dotenv
import os

load_dotenv()

# Matching parameters
MATCH_THRESHOLD = float(os.getenv("MATCH_THRESHOLD", "0.85"))
GOOGLE_CONFIDENCE_THRESHOLD = float(os.getenv("GOOGLE_CONFIDENCE_THRESHOLD", "0.8"))

# Runtime parameters
CONCURRENCY = int(os.getenv("CONCURRENCY", "8"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# File names
CITIES_CSV = os.getenv("CITIES_CSV", "cities.csv")
GOOGLE_CITIES_CSV = os.getenv("GOOGLE_CITIES_CSV", "google_cities.csv")
RAW_LOCATIONS_CSV = os.getenv("RAW_LOCATIONS_CSV", "rawlocations.csv")
OUTPUT_CSV = os.getenv("OUTPUT_CSV", "rawlocations_linked.csv")

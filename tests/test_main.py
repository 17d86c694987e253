import pandas as pd

import main
from location_linker.models import LinkCode


def write_inputs(tmp_path):
    cities = tmp_path / "cities.csv"
    pd.DataFrame([
        {"id": 1, "city": "Springfield", "region": None, "state": "IL", "country": "US"},
        {"id": 2, "city": "Springfield", "region": None, "state": "OH", "country": "US"},
        {"id": 3, "city": "Chicago", "region": None, "state": "IL", "country": "US"},
        {"id": 4, "city": "Paris", "region": None, "state": None, "country": "FR"},
    ]).to_csv(cities, index=False)

    google_cities = tmp_path / "google_cities.csv"
    pd.DataFrame([
        {"cleaned_location": "chicagoilus", "city_id": 3, "confidence": 0.95},
        {"cleaned_location": "parisfr", "city_id": 4, "confidence": 0.4},
    ]).to_csv(google_cities, index=False)

    raw = tmp_path / "rawlocations.csv"
    pd.DataFrame([
        {"id": "r1", "inventor_id": "i1", "raw_city": "CHICAGO", "cleaned_location": "chicagoilus",
         "city": "Chicago", "state": "IL", "country": "US", "cleaned_country": "US"},
        {"id": "r2", "inventor_id": "i1", "raw_city": "Springfeld", "cleaned_location": "springfeldilus",
         "city": "Springfeld", "state": "IL", "country": "US", "cleaned_country": "US"},
        {"id": "r3", "inventor_id": "i1", "raw_city": "Springfield", "cleaned_location": "springfieldilus",
         "city": "Springfield", "state": "IL", "country": "US", "cleaned_country": "US"},
        {"id": "r4", "inventor_id": "i1", "raw_city": "Springfield", "cleaned_location": "springfieldohus",
         "city": "Springfield", "state": "OH", "country": "US", "cleaned_country": "US"},
        {"id": "r5", "inventor_id": None, "raw_city": "Paris", "cleaned_location": "parisfr",
         "city": "Paris", "state": None, "country": "FR", "cleaned_country": "FR"},
        {"id": "r6", "inventor_id": None, "raw_city": "Atlantis", "cleaned_location": None,
         "city": "Atlantis", "state": None, "country": None, "cleaned_country": None},
    ]).to_csv(raw, index=False)
    return cities, google_cities, raw


def test_load_raw_locations_from_csv(tmp_path):
    _, _, raw = write_inputs(tmp_path)

    records = main.load_raw_locations_from_csv(str(raw))

    assert len(records) == 6
    assert records[0].id == "r1"
    assert records[0].raw_city_text == "CHICAGO"
    assert records[0].cleaned_country == "US"
    assert records[4].inventor_id is None
    assert records[4].state is None
    assert all(r.linked_city is None for r in records)


def test_run_links_and_writes_results(tmp_path, monkeypatch):
    cities, google_cities, raw = write_inputs(tmp_path)
    output = tmp_path / "out.csv"
    monkeypatch.setattr(main, "CITIES_CSV", str(cities))
    monkeypatch.setattr(main, "GOOGLE_CITIES_CSV", str(google_cities))
    monkeypatch.setattr(main, "RAW_LOCATIONS_CSV", str(raw))
    monkeypatch.setattr(main, "OUTPUT_CSV", str(output))
    monkeypatch.setattr(main, "MATCH_THRESHOLD", 0.85)
    monkeypatch.setattr(main, "GOOGLE_CONFIDENCE_THRESHOLD", 0.8)

    records = main.run()

    codes = {r.id: r.link_code for r in records}
    assert codes == {
        "r1": LinkCode.GOOGLE_EXACT,
        "r2": LinkCode.FUZZY_CITY,
        "r3": LinkCode.EXACT_CITY,
        "r4": LinkCode.EXACT_CITY,
        "r5": LinkCode.FUZZY_CITY,  # low-confidence google row is dropped; exact city/country instead
        "r6": None,
    }
    # Inventor i1 has Springfield twice in IL and once in OH
    assert records[3].linked_city.state == "IL"

    out = pd.read_csv(output, dtype={"id": str})
    assert list(out.columns) == ["id", "raw_city", "city_id", "link_code", "linked_city"]
    row = out.set_index("id").loc["r2"]
    assert row["city_id"] == 1
    assert row["link_code"] == 3
    assert row["linked_city"] == "Springfield, IL, US"
    assert pd.isna(out.set_index("id").loc["r6", "link_code"])


def test_namibia_locations_load_and_link(tmp_path):
    from location_linker.disambiguator import disambiguate
    from location_linker.reference import GoogleCities, load_cities_from_csv

    cities_path = tmp_path / "cities.csv"
    cities_path.write_text("id,city,region,state,country\n1,Windhoek,Khomas,,NA\n")
    raw = tmp_path / "rawlocations.csv"
    raw.write_text(
        "id,raw_city,city,state,country,cleaned_country\n"
        "r1,Windhoek,Windhoek,,NA,NA\n"
        "r2,Windhoeck,Windhoeck,,NA,NA\n"
    )

    cities = load_cities_from_csv(str(cities_path))
    records = main.load_raw_locations_from_csv(str(raw))

    assert records[0].country == "NA"
    assert records[0].cleaned_country == "NA"
    assert records[0].state is None

    disambiguate(cities, GoogleCities([], cities, 0.8), records, match_threshold=0.85)

    assert [r.link_code for r in records] == [LinkCode.FUZZY_CITY, LinkCode.FUZZY_CITY]
    assert all(r.linked_city.city == "Windhoek" for r in records)

import pytest

from location_linker.models import CityRecord
from location_linker.reference.cities import Cities

IL_TOWNS = [
    "Chicago", "Aurora", "Naperville", "Joliet", "Rockford", "Elgin", "Peoria",
    "Champaign", "Waukegan", "Cicero", "Bloomington", "Arlington Heights", "Evanston",
    "Decatur", "Schaumburg", "Bolingbrook", "Palatine", "Skokie", "Des Plaines",
    "Orland Park", "Tinley Park", "Oak Lawn", "Berwyn", "Mount Prospect", "Normal",
    "Wheaton", "Hoffman Estates", "Oak Park", "Downers Grove", "Elmhurst", "Glenview",
    "DeKalb", "Lombard", "Belleville", "Moline", "Buffalo Grove", "Bartlett", "Urbana",
    "Quincy",
]


@pytest.fixture
def springfield_il():
    return CityRecord(city_id=1, city="Springfield", state="IL", country="US")


@pytest.fixture
def springfield_oh():
    return CityRecord(city_id=2, city="Springfield", state="OH", country="US")


@pytest.fixture
def city_records(springfield_il, springfield_oh):
    """Springfield plus 39 other Illinois cities, a few Ohio cities and some French ones."""
    records = [springfield_il]
    records += [
        CityRecord(city_id=100 + i, city=name, state="IL", country="US")
        for i, name in enumerate(IL_TOWNS)
    ]
    records += [
        springfield_oh,
        CityRecord(city_id=3, city="Columbus", state="OH", country="US"),
        CityRecord(city_id=4, city="Dayton", state="OH", country="US"),
        CityRecord(city_id=10, city="Paris", state=None, country="FR"),
        CityRecord(city_id=11, city="Marseille", state=None, country="FR"),
        CityRecord(city_id=12, city=None, region="Bretagne", country="FR"),
    ]
    return records


@pytest.fixture
def cities(city_records):
    return Cities(city_records)

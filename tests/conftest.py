# tests/conftest.py
import os
from types import SimpleNamespace

import maxminddb
import pytest
from fastapi.testclient import TestClient

from geoip_api.main import create_app
from geoip_api.services.database import DatabaseHandle

# MaxMind's GeoIP2-City-Test.mmdb (github.com/maxmind/MaxMind-DB, test-data/), from the
# environment or dropped into tests/data/
BUNDLED_TEST_DB = os.path.join(os.path.dirname(__file__), "data", "GeoIP2-City-Test.mmdb")


def _reference_database_path():
    path = os.getenv("GEOIP_TEST_DB")
    if path:
        return path
    if os.path.isfile(BUNDLED_TEST_DB):
        return BUNDLED_TEST_DB
    return None


GEOIP_TEST_DB = _reference_database_path()

LINKOPING = {
    "city": {"geoname_id": 2694762, "names": {"de": "Linköping", "en": "Linköping", "fr": "Linköping"}},
    "continent": {"code": "EU", "geoname_id": 6255148, "names": {"en": "Europe"}},
    "country": {
        "geoname_id": 2661886,
        "is_in_european_union": True,
        "iso_code": "SE",
        "names": {"de": "Schweden", "en": "Sweden", "fr": "Suède"},
    },
    "location": {"accuracy_radius": 76, "latitude": 58.4167, "longitude": 15.6167, "time_zone": "Europe/Stockholm"},
    "registered_country": {
        "geoname_id": 2921044,
        "is_in_european_union": True,
        "iso_code": "DE",
        "names": {"de": "Deutschland", "en": "Germany"},
    },
    "subdivisions": [
        {"geoname_id": 2685867, "iso_code": "E", "names": {"en": "Östergötland County", "fr": "Comté d'Östergötland"}}
    ],
}

LONDON = {
    "city": {"names": {"en": "London"}},
    "country": {"iso_code": "GB", "names": {"en": "United Kingdom"}},
    "location": {"latitude": 51.5142, "longitude": -0.0931, "time_zone": "Europe/London"},
    "registered_country": {"names": {"en": "United Kingdom"}},
    "subdivisions": [{"names": {"en": "England"}}, {"names": {"en": "City of London"}}],
}

# Country-level entry only: no city, location or subdivisions
SPARSE = {"country": {"iso_code": "US", "names": {"en": "United States"}}}

RECORDS = {
    "89.160.20.128": LINKOPING,
    "81.2.69.142": LONDON,
    "2001:480::1": SPARSE,
    "203.0.113.9": maxminddb.InvalidDatabaseError("The MaxMind DB file's data section contains bad data"),
    "198.51.100.7": ["not", "a", "map"],
}


class FakeReader:
    """In-memory stand-in for maxminddb.Reader keyed by address text"""

    def __init__(self, records=None, ip_version=6):
        self.records = RECORDS if records is None else records
        self.ip_version = ip_version
        self.calls = []
        self.closed = False

    def metadata(self):
        return SimpleNamespace(
            database_type="GeoIP2-City",
            build_epoch=1700000000,
            node_count=len(self.records),
            ip_version=self.ip_version,
            languages=["de", "en", "fr"],
        )

    def get(self, address):
        self.calls.append(address)
        value = self.records.get(str(address))
        if isinstance(value, Exception):
            raise value
        return value

    def close(self):
        self.closed = True


@pytest.fixture
def fake_reader():
    return FakeReader()


@pytest.fixture
def database(fake_reader):
    return DatabaseHandle("/data/geo/test.mmdb", fake_reader)


@pytest.fixture
def app(database):
    return create_app(database=database, include_ip=True, metrics_enabled=False)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client

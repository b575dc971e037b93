"""
Tests for the catalog HTTP endpoint.
"""

from fastapi.testclient import TestClient

from coursereader.domain.errors import CatalogUnavailable
from coursereader.interface.api import create_app

from conftest import StaticCatalog, make_course


class BrokenCatalog:
    def list_available_courses(self):
        raise CatalogUnavailable("disk unreadable")


def test_available_courses_returns_camel_case_list():
    reader = StaticCatalog([make_course("c1", "1.0", estimatedHours=2)])
    client = TestClient(create_app(reader))

    response = client.get("/api/courses/available")

    assert response.status_code == 200
    assert response.headers["cache-control"] == "no-store"
    body = response.json()
    assert body[0]["id"] == "c1"
    assert body[0]["estimatedHours"] == 2
    assert body[0]["chaptersContent"][0]["id"] == "ch1"
    assert "author" not in body[0]


def test_every_request_reads_the_catalog():
    reader = StaticCatalog([])
    client = TestClient(create_app(reader))
    client.get("/api/courses/available")
    client.get("/api/courses/available")
    assert reader.calls == 2


def test_reader_failure_returns_500():
    client = TestClient(create_app(BrokenCatalog()))

    response = client.get("/api/courses/available")

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to load courses"}


def test_health():
    client = TestClient(create_app(StaticCatalog()))
    assert client.get("/health").json() == {"status": "healthy"}

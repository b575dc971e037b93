"""
HTTP catalog reader.

Client side of GET /api/courses/available. Every failure mode of the fetch
(transport, timeout, error status, malformed payload) surfaces as
CatalogUnavailable so the sync engine can report it without touching the
local store.
"""

from __future__ import annotations

import logging

import requests
from pydantic import TypeAdapter, ValidationError

from coursereader.domain.catalog import AvailableCourse
from coursereader.domain.errors import CatalogUnavailable

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0

_COURSE_LIST = TypeAdapter(list[AvailableCourse])


class HttpCatalogReader:
    """Reads the catalog from the course endpoint."""

    def __init__(
        self,
        url: str,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        """
        Args:
            url: Full endpoint URL, e.g. http://localhost:8000/api/courses/available
            timeout: Seconds before the request is abandoned
            session: Optional requests session (connection reuse, testing)
        """
        self.url = url
        self.timeout = timeout
        self._session = session

    def list_available_courses(self) -> list[AvailableCourse]:
        """
        Fetch and validate the course list.

        Raises:
            CatalogUnavailable: On any fetch or validation failure
        """
        get = self._session.get if self._session is not None else requests.get
        logger.debug("Fetching catalog from %s", self.url)

        try:
            response = get(
                self.url,
                timeout=self.timeout,
                headers={"Accept": "application/json", "Cache-Control": "no-cache"},
            )
            response.raise_for_status()
        except requests.exceptions.Timeout as e:
            raise CatalogUnavailable(
                f"Catalog request timed out after {self.timeout}s"
            ) from e
        except requests.exceptions.HTTPError as e:
            raise CatalogUnavailable(f"Catalog returned HTTP {response.status_code}") from e
        except requests.exceptions.RequestException as e:
            raise CatalogUnavailable(f"Failed to fetch catalog: {e}") from e

        try:
            payload = response.json()
        except ValueError as e:
            raise CatalogUnavailable(f"Catalog response is not JSON: {e}") from e

        try:
            courses = _COURSE_LIST.validate_python(payload)
        except ValidationError as e:
            raise CatalogUnavailable(
                f"Catalog payload is invalid ({e.error_count()} errors)"
            ) from e

        logger.info("Fetched %d courses from catalog", len(courses))
        return courses

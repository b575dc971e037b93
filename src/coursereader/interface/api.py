"""
Catalog read endpoint.

Serves GET /api/courses/available from a catalog reader, typically the
filesystem reader over the authored content directory. Responses are never
cached so a new course version is visible on the next sync.
"""

import logging

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from coursereader import __version__
from coursereader.infrastructure.catalog.reader import CatalogReader

logger = logging.getLogger(__name__)

NO_STORE = {"Cache-Control": "no-store"}


def create_app(catalog_reader: CatalogReader) -> FastAPI:
    """
    Build the API application around a catalog reader.

    Args:
        catalog_reader: Source of the course list
    """
    app = FastAPI(title="Course Reader Catalog API", version=__version__)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    router = APIRouter(prefix="/api/courses", tags=["Courses"])

    @router.get("/available")
    def available_courses() -> JSONResponse:
        try:
            courses = catalog_reader.list_available_courses()
        except Exception as e:
            logger.error("Error fetching courses: %s", e)
            return JSONResponse(
                status_code=500,
                content={"error": "Failed to load courses"},
                headers=NO_STORE,
            )

        return JSONResponse(
            content=[course.to_wire() for course in courses], headers=NO_STORE
        )

    @app.get("/health")
    def health():
        return {"status": "healthy"}

    app.include_router(router)
    return app

"""FastAPI application factory for the index REST API."""

from fastapi import APIRouter, FastAPI

from taskboard_index.api.index_routes import register_index_routes


def create_app(service) -> FastAPI:
    """Build and return a FastAPI app wired to the given IndexService."""
    app = FastAPI(title="taskboard-index", docs_url="/api/docs", openapi_url="/api/openapi.json")

    api = APIRouter(prefix="/api")
    register_index_routes(api, service)
    app.include_router(api)

    return app

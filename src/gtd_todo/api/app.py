"""FastAPI application factory for the todo REST API."""

from fastapi import APIRouter, FastAPI

from gtd_todo.api.routes import register_todo_routes


def create_app(store) -> FastAPI:
    """Build and return a FastAPI app wired to the given TodoStore."""
    app = FastAPI(title="gtd-todo", docs_url="/api/docs", openapi_url="/api/openapi.json")

    api = APIRouter(prefix="/api")
    register_todo_routes(api, store)
    app.include_router(api)

    return app

from fastapi import FastAPI

from app.api.errors import register_error_handlers
from app.api.routes import router
from app.container import Container


def create_app(container: Container) -> FastAPI:
    app = FastAPI(
        title="DocInsight",
        description="Anonymous document upload and parse job API",
        docs_url="/docs" if container.settings.app_env == "dev" else None,
        redoc_url=None,
    )
    app.state.container = container
    register_error_handlers(app)
    app.include_router(router)
    return app

import uvicorn

from app.api.app import create_app
from app.config.settings import Settings
from app.container import build_container
from app.logging.logger import Log
from app.worker.worker import Worker


def main() -> None:
    """Worker entry point: initialize pool -> build dependencies -> start poll loop."""
    settings = Settings()
    Log.configure(settings.log_level)
    container = build_container(settings)

    try:
        worker = Worker(container.dispatcher, settings)
        worker.run()
    finally:
        container.close()


def serve() -> None:
    """API entry point: build dependencies -> serve the HTTP app with uvicorn."""
    settings = Settings()
    Log.configure(settings.log_level)
    container = build_container(settings)

    try:
        uvicorn.run(
            create_app(container),
            host=settings.api_host,
            port=settings.api_port,
            log_level=settings.log_level.lower(),
        )
    finally:
        container.close()


if __name__ == "__main__":
    main()

from fastapi import Depends, Header, Request

from app.container import Container
from app.exceptions import AppError, ErrorKind
from app.logging.logger import Log
from app.services.sessions import session_matches


class UnauthorizedError(AppError):
    """Raised when the dispatcher trigger is called without the shared secret."""

    kind = ErrorKind.AUTHORIZATION
    status_code = 401


def get_container(request: Request) -> Container:
    return request.app.state.container


def require_dispatcher_secret(
    authorization: str | None = Header(default=None),
    container: Container = Depends(get_container),
) -> None:
    secret = container.settings.dispatcher_secret
    if not secret:
        Log.warning("Dispatcher trigger called but no dispatcher secret is configured")
        raise UnauthorizedError("Unauthorized")
    if authorization is None or not session_matches(f"Bearer {secret}", authorization):
        raise UnauthorizedError("Unauthorized")

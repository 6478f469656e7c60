from fastapi import HTTPException
import logging

from ..exceptions import (
    AuthFailure,
    ConfigError,
    GameError,
    GuessDuelError,
    InvalidInputError,
    RateLimited,
    RequestTimeout,
)

logger = logging.getLogger(__name__)


def status_for(exc: GuessDuelError) -> int:
    """HTTP status reported for a Guess Duel error."""
    if isinstance(exc, (ConfigError, InvalidInputError)):
        return 400
    if isinstance(exc, AuthFailure):
        return 401
    if isinstance(exc, GameError):
        return 409
    if isinstance(exc, RateLimited):
        return 429
    if isinstance(exc, RequestTimeout):
        return 504
    # Upstream, generation and judgment failures
    return 502


def to_http_exception(exc: GuessDuelError) -> HTTPException:
    status = status_for(exc)
    if status >= 500:
        logger.error(f"AI request failed: {exc}")
    else:
        logger.warning(f"Request rejected ({status}): {exc}")
    return HTTPException(status_code=status, detail=str(exc))

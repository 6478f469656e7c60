from typing import Optional


class GuessDuelError(Exception):
    """Base exception for the Guess Duel project."""


class ConfigError(GuessDuelError):
    """Raised when settings are missing or invalid (e.g., empty API key)."""


# --- Judgment client (transport) failures ---

class JudgmentClientError(GuessDuelError):
    """Base class for failures of a single text-generation request."""


class RequestTimeout(JudgmentClientError):
    """Raised when a provider call exceeds the request timeout."""


class AuthFailure(JudgmentClientError):
    """Raised on HTTP 401/403. Never retried."""


class RateLimited(JudgmentClientError):
    """Raised on HTTP 429."""


class UpstreamError(JudgmentClientError):
    """Raised on any other non-success HTTP status."""

    def __init__(self, status: int, body_excerpt: str = ""):
        self.status = status
        self.body_excerpt = body_excerpt
        super().__init__(f"AI request failed ({status}): {body_excerpt}")


class MalformedResponse(JudgmentClientError):
    """Raised when the response body lacks the provider's text field."""


class ConnectionFailure(JudgmentClientError):
    """Raised when the provider could not be reached at all."""


# --- Component-level exhaustion ---

class GenerationFailed(GuessDuelError):
    """Raised when the name generator runs out of attempts."""


class JudgmentUnparseable(GuessDuelError):
    """Raised when the model never answered with a recognizable verdict."""


# --- Game rules ---

class GameError(GuessDuelError):
    """Base class for rule violations reported to the caller."""

    def __init__(self, message: str, player_num: Optional[int] = None):
        self.player_num = player_num
        super().__init__(message)


class GameNotOverError(GameError):
    """Raised when a result is requested before both players finished."""


class PlayerNotPlayingError(GameError):
    """Raised when a player acts outside the playing phase."""


class QuestionBudgetExhausted(GameError):
    """Raised when a player asks after using up the question budget."""


class RequestInProgressError(GameError):
    """Raised when a player already has a judgment request in flight."""


class InvalidInputError(GameError):
    """Raised for empty or over-long question/guess text."""


def is_retryable_transport_error(exc: BaseException) -> bool:
    """Transport failures worth another attempt; bad credentials are not."""
    return isinstance(exc, JudgmentClientError) and not isinstance(exc, AuthFailure)

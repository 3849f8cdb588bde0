from typing import Callable, TypeVar, Any, Optional, Tuple, Type
from functools import wraps

from loguru import logger

T = TypeVar("T")


class SeoAssistantError(Exception):
    """Base class for errors raised by the SEO assistant."""


class ValidationError(SeoAssistantError):
    """Missing or malformed request input. Surfaced as HTTP 400."""


class UpstreamFetchError(SeoAssistantError):
    """Target site unreachable or answered with a non-2xx status. Surfaced as HTTP 500."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class GenerationFailure(SeoAssistantError):
    """
    Text generation failed or returned something unusable.

    Never reaches the end user: callers catch it and fall back to
    locally generated content.
    """


class PersistenceError(SeoAssistantError):
    """Project store unavailable. Logged and absorbed."""


def safe_execute(default: T, *exc_types: Type[BaseException]):
    """
    Decorator to catch the given exceptions and return a default value.

    With no exception types it catches ``Exception``.
    """
    catch: Tuple[Type[BaseException], ...] = exc_types or (Exception,)

    def decorator(fn: Callable[..., T]) -> Callable[..., T]:
        @wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            try:
                return fn(*args, **kwargs)
            except catch as exc:
                logger.warning("safe_execute caught error in {}: {}", fn.__name__, exc)
                return default
        return wrapper
    return decorator

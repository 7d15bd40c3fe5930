"""
Argument preconditions for the fluent builder.

Invalid configuration is rejected the moment it is supplied, so a bad
timeout or status code surfaces at the builder call that introduced it
instead of on the first request.
"""

import functools
import inspect
from typing import Any, Callable, TypeVar
import structlog

from restclient.shared.exceptions import PreconditionError

logger = structlog.get_logger(__name__)

F = TypeVar('F', bound=Callable[..., Any])


def require(condition: Callable[..., bool], message: str) -> Callable[[F], F]:
    """
    Reject a call whose arguments fail ``condition``.

    The condition is called with the same arguments as the decorated
    function, defaults filled in.

    Raises:
        PreconditionError: If the condition is false or cannot be evaluated
    """
    def decorator(func: F) -> F:
        signature = inspect.signature(func)

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            bound = signature.bind(*args, **kwargs)
            bound.apply_defaults()

            try:
                satisfied = condition(*bound.args, **bound.kwargs)
            except Exception as e:
                raise PreconditionError(f"{message} ({func.__qualname__}: {e})") from e

            if not satisfied:
                logger.warning("Rejected configuration", call=func.__qualname__, reason=message)
                raise PreconditionError(message)

            return func(*args, **kwargs)

        return wrapper
    return decorator


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def positive(value: Any) -> bool:
    return _is_number(value) and value > 0


def non_negative(value: Any) -> bool:
    return _is_number(value) and value >= 0


def valid_status_code(value: Any) -> bool:
    """HTTP status codes are integers in 100..599."""
    return isinstance(value, int) and not isinstance(value, bool) and 100 <= value <= 599


def non_empty_string(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())

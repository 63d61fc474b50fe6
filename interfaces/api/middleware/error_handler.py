"""Turn use case results into HTTP responses for the object routes."""

import functools
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import structlog
from fastapi import HTTPException, status
from returns.result import Failure, Success

from interfaces.api.routes.helpers import _map_app_error_to_http_exception

logger = structlog.get_logger()

T_co = TypeVar("T_co")


def _internal_error() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Internal server error",
    )


def handle_use_case_errors(
    func: Callable[..., Awaitable[T_co]],
) -> Callable[..., Awaitable[T_co]]:
    """Unwrap the ``Result`` an endpoint returns.

    ``Success`` becomes the response body and ``Failure`` is raised as the
    HTTP error for its category. Anything else the endpoint raises is logged
    and answered with a bare 500 so filesystem details never reach clients.
    """

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> T_co:  # noqa: ANN401
        try:
            result = await func(*args, **kwargs)
        except HTTPException:
            raise
        except Exception as exc:
            logger.exception(
                "unexpected_error",
                error_type=type(exc).__name__,
                endpoint=func.__name__,
            )
            raise _internal_error() from exc

        if isinstance(result, Success):
            return result.unwrap()
        if isinstance(result, Failure):
            raise _map_app_error_to_http_exception(result.failure()) from None

        logger.error("unexpected_result_type", endpoint=func.__name__)
        raise _internal_error()

    return wrapper

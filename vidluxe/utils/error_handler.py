import asyncio
import functools
from typing import TypeVar, Callable, Any, Dict, Type, Union, Optional
from loguru import logger
from ..exceptions import VidLuxeException

T = TypeVar('T')


def handle_exceptions(
    retries: int = 3,
    fallback: Any = None,
    exceptions: Union[Type[Exception], tuple] = Exception,
    backoff_factor: float = 2.0,
    max_delay: float = 60.0
):
    """
    Decorator to retry an async operation with exponential backoff.

    Only meant for idempotent calls (e.g. downloading a finished result);
    subprocess runs and task polling are never retried here.

    Args:
        retries: Number of attempts
        fallback: Value to return if all attempts fail (None re-raises)
        exceptions: Exception types to catch and retry
        backoff_factor: Exponential backoff factor
        max_delay: Maximum delay between retries
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs) -> T:
            last_exception = None

            for attempt in range(retries):
                try:
                    return await func(*args, **kwargs)
                except exceptions as e:
                    last_exception = e

                    if attempt < retries - 1:
                        delay = min(backoff_factor ** attempt, max_delay)
                        logger.warning(f"Attempt {attempt + 1} failed: {e}. Retrying in {delay}s...")
                        await asyncio.sleep(delay)
                    else:
                        logger.error(f"All {retries} attempts failed: {e}")

            if fallback is not None:
                logger.info(f"Returning fallback value: {fallback}")
                return fallback

            raise last_exception

        return async_wrapper

    return decorator


def log_exceptions(
    log_level: str = "ERROR",
    include_traceback: bool = True,
    custom_message: Optional[str] = None
):
    """
    Decorator to log exceptions before re-raising them.

    Args:
        log_level: Log level for exception logging
        include_traceback: Whether to include traceback in log
        custom_message: Custom message to include in log
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        def _log(e: Exception):
            message = custom_message or f"Exception in {func.__name__}"
            if include_traceback:
                logger.opt(exception=True).log(log_level, f"{message}: {e}")
            else:
                logger.log(log_level, f"{message}: {e}")

        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs) -> T:
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                _log(e)
                raise

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs) -> T:
            try:
                return func(*args, **kwargs)
            except Exception as e:
                _log(e)
                raise

        if asyncio.iscoroutinefunction(func):
            return async_wrapper
        else:
            return sync_wrapper

    return decorator


def convert_exceptions(exception_map: dict):
    """
    Decorator to convert library exceptions to VidLuxe exceptions.

    Args:
        exception_map: Dictionary mapping exception types to VidLuxe exception types
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs) -> T:
            try:
                return await func(*args, **kwargs)
            except VidLuxeException:
                raise
            except Exception as e:
                for source_exc, target_exc in exception_map.items():
                    if isinstance(e, source_exc):
                        raise target_exc(str(e) or type(e).__name__, details={"original_exception": type(e).__name__}) from e
                raise

        return async_wrapper

    return decorator


class ErrorHandler:
    """Centralized error handling utilities."""

    @staticmethod
    def to_result(e: Exception, context: str = "") -> Dict[str, Any]:
        """Convert an exception into the structured failure returned to callers."""
        if isinstance(e, VidLuxeException):
            reason = e.message
            error_code = e.error_code
        else:
            reason = str(e) or type(e).__name__
            error_code = "INTERNAL_ERROR"

        if context:
            logger.error(f"{context}: {reason}")

        return {
            "success": False,
            "error": reason,
            "error_code": error_code,
        }


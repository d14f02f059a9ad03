"""
Test suite for the error handling helpers.
"""

import pytest

from vidluxe.exceptions import (
    AnalysisFailedException,
    ProviderException,
    TaskTimeoutException,
    TimeoutException,
)
from vidluxe.utils.error_handler import ErrorHandler, convert_exceptions, handle_exceptions, log_exceptions
from vidluxe.utils.helper import round_half_up, stable_hash_int


async def test_handle_exceptions_retries_then_succeeds():
    attempts = []

    @handle_exceptions(retries=3, exceptions=ConnectionError, backoff_factor=0.01)
    async def flaky():
        attempts.append(1)
        if len(attempts) < 3:
            raise ConnectionError("reset")
        return "ok"

    assert await flaky() == "ok"
    assert len(attempts) == 3


async def test_handle_exceptions_does_not_retry_other_errors():
    attempts = []

    @handle_exceptions(retries=3, exceptions=ConnectionError, backoff_factor=0.01)
    async def broken():
        attempts.append(1)
        raise KeyError("nope")

    with pytest.raises(KeyError):
        await broken()
    assert len(attempts) == 1


async def test_convert_exceptions_maps_library_errors():
    @convert_exceptions({ConnectionError: ProviderException})
    async def call():
        raise ConnectionError("refused")

    with pytest.raises(ProviderException) as exc_info:
        await call()
    assert exc_info.value.details["original_exception"] == "ConnectionError"
    assert isinstance(exc_info.value.__cause__, ConnectionError)


async def test_convert_exceptions_keeps_own_exceptions():
    @convert_exceptions({Exception: ProviderException})
    async def call():
        raise TaskTimeoutException("slow")

    with pytest.raises(TaskTimeoutException):
        await call()


def test_log_exceptions_reraises_sync():
    @log_exceptions(include_traceback=False)
    def fail():
        raise ValueError("bad")

    with pytest.raises(ValueError):
        fail()


def test_to_result_is_structured():
    assert ErrorHandler.to_result(AnalysisFailedException("no frames could be extracted")) == {
        "success": False,
        "error": "Color analysis failed: no frames could be extracted",
        "error_code": "ANALYSIS_FAILED",
    }
    result = ErrorHandler.to_result(RuntimeError())
    assert result["error"] == "RuntimeError"
    assert result["error_code"] == "INTERNAL_ERROR"


def test_task_timeout_is_a_timeout():
    assert issubclass(TaskTimeoutException, TimeoutException)
    assert TaskTimeoutException("x").error_code == "TASK_TIMEOUT"


@pytest.mark.parametrize("value, expected", [(2.5, 3), (2.4, 2), (-2.5, -2), (0.5, 1)])
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected


def test_stable_hash_is_stable():
    assert stable_hash_int("a/b.jpg") == stable_hash_int("a/b.jpg")
    assert stable_hash_int("a/b.jpg") != stable_hash_int("a/c.jpg")
    assert 0 <= stable_hash_int("x") < 2 ** 32

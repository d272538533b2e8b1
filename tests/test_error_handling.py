"""Tests for error codes, status mapping and transport errors."""
import pytest

from error_handling import (
    BadRequestError,
    ErrorCode,
    MethodNotAllowedError,
    ShutdownError,
    TransportError,
    UnauthorizedError,
    status_for_error,
)


@pytest.mark.parametrize("code,expected", [
    (None, 200),
    (ErrorCode.INVALID_REQUEST, 400),
    (ErrorCode.METHOD_NOT_FOUND, 404),
    (ErrorCode.INVALID_PARAMS, 400),
    (ErrorCode.INTERNAL_ERROR, 500),
    (-32099, 500),
])
def test_status_for_error(code, expected):
    assert status_for_error(code) == expected


def test_transport_error_statuses():
    assert BadRequestError("bad").status_code == 400
    assert UnauthorizedError().status_code == 401
    assert UnauthorizedError().message == "Invalid or expired session"

    error = MethodNotAllowedError("DELETE")
    assert isinstance(error, TransportError)
    assert error.status_code == 405
    assert error.details == {"method": "DELETE"}


def test_shutdown_error_message():
    error = ShutdownError("streamable-http", 2.5)

    assert error.timeout == 2.5
    assert str(error) == "streamable-http transport did not shut down within 2.5s"

"""
Tests for the exception hierarchy.
"""

import asyncio

import pytest

from filedrop.core.exceptions import (
    ConfigurationError, ErrorKind, ErrorLevel, FiledropError, TransportError,
    UploadAbortedError, is_abort
)


class TestExceptions:
    """Test cases for filedrop exceptions."""

    def test_base_error_fields(self):
        error = FiledropError("something broke", "E1", ErrorLevel.WARNING)

        assert str(error) == "something broke"
        assert error.message == "something broke"
        assert error.error_code == "E1"
        assert error.level == ErrorLevel.WARNING

    @pytest.mark.parametrize("error,code", [
        (ConfigurationError("bad"), "CONFIG_ERROR"),
        (TransportError("down", status=503), "TRANSPORT_ERROR"),
        (UploadAbortedError(), "UPLOAD_ABORTED"),
    ])
    def test_error_codes(self, error, code):
        assert isinstance(error, FiledropError)
        assert error.error_code == code

    def test_transport_error_status(self):
        error = TransportError("Server responded with 503", status=503)

        assert error.status == 503
        assert error.kind == ErrorKind.OTHER_FAILURE

    def test_aborted_default_message(self):
        assert UploadAbortedError().message == "Upload aborted"


class TestIsAbort:
    """Abort classification of transport errors."""

    def test_aborted_error(self):
        assert is_abort(UploadAbortedError())

    def test_task_cancellation(self):
        assert is_abort(asyncio.CancelledError())

    def test_error_with_aborted_kind(self):
        class CustomAbort(Exception):
            kind = ErrorKind.ABORTED

        assert is_abort(CustomAbort())

    @pytest.mark.parametrize("error", [
        TransportError("down"),
        ConnectionResetError(),
        RuntimeError("boom"),
    ])
    def test_other_errors(self, error):
        assert not is_abort(error)

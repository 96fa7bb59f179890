"""Unit tests for exchange classification."""

import json

import httpx
import pytest
from pydantic import ValidationError

from clx_xms.exceptions import (
    ApiResponseError,
    DecodeError,
    TransportError,
    UnexpectedResponseError,
)
from clx_xms.models import MtBatchSmsResult, MtBatchTextSmsResult, Tags
from clx_xms.utils.http import RawExchange, classify

URL = "https://xms.test/xms/v1/plan/batches"


def exchange(status_code, content=b"", headers=None, method="POST"):
    request = httpx.Request(method, URL)
    response = httpx.Response(
        status_code, content=content, headers=headers or {}, request=request
    )
    return RawExchange(request=request, response=response)


class TestTransportFailure:
    def test_transport_error_wins(self):
        request = httpx.Request("GET", URL)
        error = httpx.ConnectError("connection refused", request=request)
        raw = RawExchange(request=request, error=error)

        with pytest.raises(TransportError) as exc_info:
            classify(raw, (200,), Tags)

        assert exc_info.value.original_error is error
        assert exc_info.value.__cause__ is error

    @pytest.mark.parametrize(
        "error_type", [httpx.ReadTimeout, httpx.DecodingError, httpx.TooManyRedirects]
    )
    def test_any_request_error_is_transport_error(self, error_type):
        request = httpx.Request("GET", URL)
        error = error_type("failed", request=request)
        raw = RawExchange(request=request, error=error)

        with pytest.raises(TransportError) as exc_info:
            classify(raw, (200,), Tags)

        assert exc_info.value.original_error is error

    def test_raw_exchange_needs_exactly_one_outcome(self):
        request = httpx.Request("GET", URL)
        with pytest.raises(ValueError):
            RawExchange(request=request)


class TestSuccess:
    def test_expected_status_is_decoded(self, text_batch_json):
        raw = exchange(
            201,
            json.dumps(text_batch_json).encode(),
            {"Content-Type": "application/json"},
        )
        result = classify(raw, (201,), MtBatchSmsResult)
        assert isinstance(result, MtBatchTextSmsResult)
        assert result.id == "5Z8QsIRsk86f-jHB"

    def test_no_result_type_returns_none(self):
        assert classify(exchange(204, method="DELETE"), (204,), None) is None

    def test_malformed_body_is_decode_error(self):
        raw = exchange(201, b"{this is not json", {"Content-Type": "application/json"})
        with pytest.raises(DecodeError) as exc_info:
            classify(raw, (201,), MtBatchSmsResult)
        assert exc_info.value.content == b"{this is not json"
        assert isinstance(exc_info.value.original_error, ValidationError)
        assert exc_info.value.__cause__ is exc_info.value.original_error

    def test_wrong_shape_is_decode_error(self):
        raw = exchange(200, b'{"tags": "not-a-list"}')
        with pytest.raises(DecodeError) as exc_info:
            classify(raw, (200,), Tags)
        assert isinstance(exc_info.value.__cause__, ValidationError)


class TestApiError:
    def test_structured_client_error(self):
        raw = exchange(
            400,
            b'{"code":"yes_this_is_code","text":"This is a text"}',
            {"Content-Type": "application/json"},
        )
        with pytest.raises(ApiResponseError) as exc_info:
            classify(raw, (201,), MtBatchSmsResult)

        error = exc_info.value
        assert error.code == "yes_this_is_code"
        assert error.text == "This is a text"
        assert error.status_code == 400

    def test_error_body_on_server_error_is_unexpected(self):
        raw = exchange(500, b'{"code":"internal","text":"oops"}')
        with pytest.raises(UnexpectedResponseError):
            classify(raw, (200,), Tags)


class TestUnexpected:
    def test_plain_text_not_found(self):
        raw = exchange(404, b"BAD", {"Content-Type": "text/plain"}, method="GET")
        with pytest.raises(UnexpectedResponseError) as exc_info:
            classify(raw, (200,), MtBatchSmsResult)

        error = exc_info.value
        assert error.status_code == 404
        assert error.content == b"BAD"
        assert error.content_type == "text/plain"

    def test_unlisted_success_status(self):
        raw = exchange(200, b'{"tags": []}')
        with pytest.raises(UnexpectedResponseError):
            classify(raw, (201,), Tags)

    def test_client_error_without_error_body(self):
        raw = exchange(400, b'{"something": "else"}')
        with pytest.raises(UnexpectedResponseError):
            classify(raw, (200,), Tags)

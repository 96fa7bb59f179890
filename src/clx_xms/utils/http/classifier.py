"""Classification of completed HTTP exchanges.

Turns a :class:`RawExchange` into either the decoded result of the
operation or exactly one exception. Rules are applied in order and the
first match wins:

1. no usable response was received: :class:`TransportError`
2. the status is one the operation expects: decode the body, or raise
   :class:`DecodeError` if it cannot be decoded
3. a 4xx status with a structured error body: :class:`ApiResponseError`
4. anything else: :class:`UnexpectedResponseError`
"""

import logging
from typing import Any, Collection

from pydantic import ValidationError

from ...exceptions import (
    ApiResponseError,
    DecodeError,
    TransportError,
    UnexpectedResponseError,
)
from ..codec import Codec, default_codec
from .request import RawExchange

logger = logging.getLogger(__name__)


def classify(
    exchange: RawExchange,
    expected_status: Collection[int],
    result_type: Any,
    codec: Codec = default_codec,
) -> Any:
    """Classify an exchange, returning the decoded result or raising.

    :param exchange: The completed exchange
    :type exchange: RawExchange
    :param expected_status: Status codes that mean success for this call
    :type expected_status: Collection[int]
    :param result_type: Type of the success body, None for an empty body
    :param codec: Codec used to decode bodies
    :type codec: Codec
    :return: The decoded success value
    :raises TransportError: If no response was received
    :raises DecodeError: If a success body could not be decoded
    :raises ApiResponseError: If the server declared a structured error
    :raises UnexpectedResponseError: For any other response
    """
    request = exchange.request

    if exchange.error is not None:
        error = exchange.error
        raise TransportError(
            f"{request.method} {request.url.path} failed: {error}",
            original_error=error,
        ) from error

    response = exchange.response
    status = response.status_code

    if status in expected_status:
        if result_type is None:
            return None
        try:
            return codec.decode(response.content, result_type)
        except ValidationError as e:
            logger.debug(
                "Could not decode %d response for %s %s",
                status,
                request.method,
                request.url.path,
            )
            raise DecodeError(
                f"Malformed response body for {request.method} {request.url.path}",
                original_error=e,
                content=response.content,
            ) from e

    if exchange.is_client_error():
        api_error = codec.decode_error(response.content)
        if api_error is not None:
            logger.debug(
                "API rejected %s %s: %s", request.method, request.url.path, api_error.code
            )
            raise ApiResponseError(api_error.code, api_error.text, status_code=status)

    logger.debug(
        "Unexpected %d response for %s %s", status, request.method, request.url.path
    )
    raise UnexpectedResponseError(response)

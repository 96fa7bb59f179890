"""JSON encoding and decoding of API objects.

Requests are encoded from their model's wire representation; responses
are decoded with a pydantic ``TypeAdapter`` for the declared result
type, so discriminated unions and generic pages decode the same way as
plain models.
"""

import json
import logging
from functools import lru_cache
from typing import Any, Optional

from pydantic import TypeAdapter, ValidationError

from ..models.base_models import ApiError, BaseApiModel

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json; charset=UTF-8"


@lru_cache(maxsize=None)
def _adapter(result_type: Any) -> TypeAdapter:
    return TypeAdapter(result_type)


class Codec:
    """Serializes request models and deserializes response bodies."""

    content_type = JSON_CONTENT_TYPE

    def encode(self, obj: BaseApiModel) -> bytes:
        """Encode a request model as a UTF-8 JSON body.

        :param obj: Request model
        :type obj: BaseApiModel
        :return: JSON body
        :rtype: bytes
        """
        return json.dumps(obj.to_json_dict()).encode("utf-8")

    def decode(self, content: bytes, result_type: Any) -> Any:
        """Decode a response body into ``result_type``.

        :param content: Raw response body
        :type content: bytes
        :param result_type: Model class or type expression to decode into
        :return: Decoded value
        :raises pydantic.ValidationError: If the body is not valid JSON or
            does not match the declared type
        """
        return _adapter(result_type).validate_json(content)

    def decode_error(self, content: bytes) -> Optional[ApiError]:
        """Try to decode a structured API error body.

        :param content: Raw response body
        :type content: bytes
        :return: The API error, or None if the body is not one
        :rtype: Optional[ApiError]
        """
        if not content:
            return None
        try:
            return ApiError.model_validate_json(content)
        except ValidationError as e:
            logger.debug("Response body is not an API error: %s", e.error_count())
            return None


default_codec = Codec()

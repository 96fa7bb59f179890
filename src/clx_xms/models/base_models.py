"""Shared Pydantic models for the XMS client.

This module contains the building blocks reused by every API object:

- The common model configuration (alias population, immutability)
- Wire encodings for binary payloads (base64 and hex)
- The endpoint description used to address the API
- The structured API error body
- The generic page of a paginated listing
- Tag collections and tag updates
"""

import base64
import binascii
from typing import Annotated, Any, Dict, Generic, List, TypeVar

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
)

T = TypeVar("T")


def _decode_base64(value: Any) -> Any:
    if isinstance(value, str):
        try:
            return base64.b64decode(value, validate=True)
        except binascii.Error as e:
            raise ValueError(f"invalid base64 data: {e}") from e
    return value


def _decode_hex(value: Any) -> Any:
    if isinstance(value, str):
        try:
            return bytes.fromhex(value)
        except ValueError as e:
            raise ValueError(f"invalid hex data: {e}") from e
    return value


Base64Bytes = Annotated[
    bytes,
    BeforeValidator(_decode_base64),
    PlainSerializer(
        lambda v: base64.b64encode(v).decode("ascii"), return_type=str, when_used="json"
    ),
]
"""Bytes carried as a base64 string in JSON."""

HexBytes = Annotated[
    bytes,
    BeforeValidator(_decode_hex),
    PlainSerializer(lambda v: v.hex(), return_type=str, when_used="json"),
]
"""Bytes carried as a lower case hex string in JSON."""


class BaseApiModel(BaseModel):
    """Base model for all API objects.

    Models are immutable once constructed and accept both field names
    and wire aliases. Construction validates every field, so an instance
    only exists if it is a valid API object.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        frozen=True,
    )

    def to_json_dict(self) -> Dict[str, Any]:
        """Wire representation, omitting fields that hold no value.

        :return: JSON compatible dictionary using wire field names
        :rtype: Dict[str, Any]
        """
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class UpdateModel(BaseApiModel):
    """Base model for partial updates.

    A field never passed to the constructor is left out of the request,
    while a field explicitly passed as ``None`` is sent as JSON ``null``
    which instructs the server to unset it.
    """

    def to_json_dict(self) -> Dict[str, Any]:
        data = self.model_dump(mode="json", by_alias=True, exclude_unset=True)
        # The variant discriminator is always sent.
        if "type" in type(self).model_fields:
            data["type"] = getattr(self, "type")
        return data


class Endpoint(BaseApiModel):
    """Where and as whom API calls are made.

    :param base_url: Base URL of the REST API
    :type base_url: str
    :param service_plan_id: Account identifier, first path segment of every call
    :type service_plan_id: str
    :param token: Bearer token
    :type token: str
    """

    base_url: str = Field(min_length=1)
    service_plan_id: str = Field(min_length=1)
    token: str = Field(min_length=1, repr=False)

    def url(self, *segments: str) -> str:
        """Compose an absolute URL below the service plan.

        :param segments: Already quoted path segments
        :return: Absolute URL
        :rtype: str
        """
        path = "/".join((self.service_plan_id,) + segments)
        return f"{self.base_url.rstrip('/')}/{path}"


class ApiError(BaseApiModel):
    """Structured error body returned by the API for rejected requests.

    :param code: Machine readable error code
    :type code: str
    :param text: Human readable description
    :type text: str
    """

    code: str
    text: str


class Page(BaseApiModel, Generic[T]):
    """One page of a paginated listing.

    ``num_pages`` is the total number of pages the server reported when
    this page was fetched; it may differ between pages of the same
    listing if the collection changed in between.

    :param page: Zero based page index
    :type page: int
    :param size: Number of elements on this page
    :type size: int
    :param num_pages: Total number of pages at fetch time
    :type num_pages: int
    :param content: Elements of this page, in server order
    :type content: List[T]
    """

    page: int = Field(ge=0)
    size: int = Field(alias="page_size", ge=0)
    num_pages: int = Field(ge=0)
    content: List[T] = Field(default_factory=list)


class Tags(BaseApiModel):
    """A set of tags attached to a batch or group."""

    tags: List[str] = Field(default_factory=list)


class TagsUpdate(BaseApiModel):
    """Tags to add to and remove from a batch or group."""

    add: List[str] = Field(default_factory=list)
    remove: List[str] = Field(default_factory=list)

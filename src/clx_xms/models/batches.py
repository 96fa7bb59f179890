"""Pydantic models for outbound SMS batches.

Batches come in two variants, text and binary, distinguished on the
wire by the ``type`` field. Each variant has its own create, update and
result model with a closed set of fields; the result union
:data:`MtBatchSmsResult` is decoded by looking at the discriminator
rather than by trying each variant in turn.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import AfterValidator, Field

from .base_models import Base64Bytes, BaseApiModel, HexBytes, Page, UpdateModel

TEXT_TYPE = "mt_text"
BINARY_TYPE = "mt_binary"

Parameters = Dict[str, Dict[str, str]]
"""Template substitutions: parameter name to ``{recipient: value}``.

The reserved key ``"default"`` holds the value for recipients without
an explicit substitution.
"""


class ReportType(str, Enum):
    """Kinds of delivery report a batch can request."""

    NONE = "none"
    SUMMARY = "summary"
    FULL = "full"
    PER_RECIPIENT = "per_recipient"


def _check_recipients(values: List[str]) -> List[str]:
    for recipient in values:
        if not recipient or not recipient.strip():
            raise ValueError("recipients must be non-empty strings")
    return values


Recipients = Annotated[List[str], AfterValidator(_check_recipients)]


def substitution(default: Optional[str] = None, **values: str) -> Dict[str, str]:
    """Build one parameter's substitution map.

    :param default: Value used for recipients without a substitution
    :param values: Recipient to value substitutions
    :return: Substitution map suitable for ``parameters``
    """
    result = dict(values)
    if default is not None:
        result["default"] = default
    return result


# Creates
class MtBatchSmsCreate(BaseApiModel):
    """Fields shared by both batch create variants.

    :param sender: Originator of the messages (``from`` on the wire)
    :param to: Recipients, at least one
    :param delivery_report: Requested delivery report kind
    :param send_at: When to send, immediately if omitted
    :param expire_at: When to give up on delivery
    :param callback_url: Where delivery reports are posted
    :param tags: Tags attached to the batch
    """

    sender: str = Field(alias="from", min_length=1)
    to: Recipients = Field(min_length=1)
    delivery_report: Optional[ReportType] = None
    send_at: Optional[datetime] = None
    expire_at: Optional[datetime] = None
    callback_url: Optional[str] = None
    tags: Optional[List[str]] = None


class MtBatchTextSmsCreate(MtBatchSmsCreate):
    """Request to send a text batch."""

    type: Literal["mt_text"] = TEXT_TYPE
    body: str
    parameters: Optional[Parameters] = None


class MtBatchBinarySmsCreate(MtBatchSmsCreate):
    """Request to send a binary batch with a user data header."""

    type: Literal["mt_binary"] = BINARY_TYPE
    body: Base64Bytes
    udh: HexBytes


MtBatchSmsCreateVariant = Annotated[
    Union[MtBatchTextSmsCreate, MtBatchBinarySmsCreate],
    Field(discriminator="type"),
]


# Updates
class MtBatchSmsUpdate(UpdateModel):
    """Fields shared by both batch update variants.

    Pass a field as ``None`` to unset it on the server; leave it out to
    keep its current value.
    """

    sender: Optional[str] = Field(None, alias="from")
    to_add: Optional[List[str]] = None
    to_remove: Optional[List[str]] = None
    delivery_report: Optional[ReportType] = None
    send_at: Optional[datetime] = None
    expire_at: Optional[datetime] = None
    callback_url: Optional[str] = None


class MtBatchTextSmsUpdate(MtBatchSmsUpdate):
    """Partial update of a text batch."""

    type: Literal["mt_text"] = TEXT_TYPE
    body: Optional[str] = None
    parameters: Optional[Parameters] = None


class MtBatchBinarySmsUpdate(MtBatchSmsUpdate):
    """Partial update of a binary batch."""

    type: Literal["mt_binary"] = BINARY_TYPE
    body: Optional[Base64Bytes] = None
    udh: Optional[HexBytes] = None


MtBatchSmsUpdateVariant = Annotated[
    Union[MtBatchTextSmsUpdate, MtBatchBinarySmsUpdate],
    Field(discriminator="type"),
]


# Results
class MtBatchSmsResultBase(BaseApiModel):
    """Fields shared by both batch result variants."""

    id: str
    sender: Optional[str] = Field(None, alias="from")
    to: List[str] = Field(default_factory=list)
    canceled: bool = False
    delivery_report: Optional[ReportType] = None
    send_at: Optional[datetime] = None
    expire_at: Optional[datetime] = None
    callback_url: Optional[str] = None
    created_at: Optional[datetime] = None
    modified_at: Optional[datetime] = None
    tags: Optional[List[str]] = None


class MtBatchTextSmsResult(MtBatchSmsResultBase):
    """A text batch as stored by the server."""

    type: Literal["mt_text"] = TEXT_TYPE
    body: str
    parameters: Optional[Parameters] = None


class MtBatchBinarySmsResult(MtBatchSmsResultBase):
    """A binary batch as stored by the server."""

    type: Literal["mt_binary"] = BINARY_TYPE
    body: Base64Bytes
    udh: Optional[HexBytes] = None


MtBatchSmsResult = Annotated[
    Union[MtBatchTextSmsResult, MtBatchBinarySmsResult],
    Field(discriminator="type"),
]
"""Either batch result variant, selected by the ``type`` field."""


class PagedBatchResult(Page[MtBatchSmsResult]):
    """One page of a batch listing."""

    content: List[MtBatchSmsResult] = Field(default_factory=list, alias="batches")

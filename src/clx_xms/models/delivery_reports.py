"""Pydantic models for batch delivery reports."""

from enum import Enum
from typing import List, Literal

from pydantic import Field

from .base_models import BaseApiModel


class DeliveryStatus(str, Enum):
    """Delivery state of a message."""

    QUEUED = "Queued"
    DISPATCHED = "Dispatched"
    ABORTED = "Aborted"
    REJECTED = "Rejected"
    DELIVERED = "Delivered"
    FAILED = "Failed"
    EXPIRED = "Expired"
    UNKNOWN = "Unknown"


class DeliveryReportStatus(BaseApiModel):
    """Messages of a batch sharing one status code.

    :param code: Delivery status code
    :type code: int
    :param status: Delivery status
    :type status: DeliveryStatus
    :param count: Number of messages with this code
    :type count: int
    :param recipients: Recipients with this code, only present in full reports
    :type recipients: List[str]
    """

    code: int
    status: DeliveryStatus
    count: int = Field(ge=0)
    recipients: List[str] = Field(default_factory=list)


class BatchDeliveryReport(BaseApiModel):
    """Delivery report for a whole batch."""

    type: Literal["delivery_report_sms"] = "delivery_report_sms"
    batch_id: str
    total_message_count: int = Field(ge=0)
    statuses: List[DeliveryReportStatus] = Field(default_factory=list)

"""Pydantic models for the XMS REST API.

All names are re-exported here so call sites can import from
``clx_xms.models`` regardless of the module layout.
"""

from .base_models import (
    ApiError,
    Base64Bytes,
    BaseApiModel,
    Endpoint,
    HexBytes,
    Page,
    Tags,
    TagsUpdate,
    UpdateModel,
)
from .batches import (
    BINARY_TYPE,
    TEXT_TYPE,
    MtBatchBinarySmsCreate,
    MtBatchBinarySmsResult,
    MtBatchBinarySmsUpdate,
    MtBatchSmsCreateVariant,
    MtBatchSmsResult,
    MtBatchSmsUpdateVariant,
    MtBatchTextSmsCreate,
    MtBatchTextSmsResult,
    MtBatchTextSmsUpdate,
    PagedBatchResult,
    Parameters,
    ReportType,
    substitution,
)
from .delivery_reports import BatchDeliveryReport, DeliveryReportStatus, DeliveryStatus
from .filters import BatchDeliveryReportParams, BatchFilter, GroupFilter, QueryParams
from .groups import AutoUpdate, GroupCreate, GroupResult, GroupUpdate, PagedGroupResult

__all__ = [
    # Base
    "ApiError",
    "Base64Bytes",
    "BaseApiModel",
    "Endpoint",
    "HexBytes",
    "Page",
    "Tags",
    "TagsUpdate",
    "UpdateModel",
    # Batches
    "BINARY_TYPE",
    "TEXT_TYPE",
    "MtBatchBinarySmsCreate",
    "MtBatchBinarySmsResult",
    "MtBatchBinarySmsUpdate",
    "MtBatchSmsCreateVariant",
    "MtBatchSmsResult",
    "MtBatchSmsUpdateVariant",
    "MtBatchTextSmsCreate",
    "MtBatchTextSmsResult",
    "MtBatchTextSmsUpdate",
    "PagedBatchResult",
    "Parameters",
    "ReportType",
    "substitution",
    # Delivery reports
    "BatchDeliveryReport",
    "DeliveryReportStatus",
    "DeliveryStatus",
    # Filters
    "BatchDeliveryReportParams",
    "BatchFilter",
    "GroupFilter",
    "QueryParams",
    # Groups
    "AutoUpdate",
    "GroupCreate",
    "GroupResult",
    "GroupUpdate",
    "PagedGroupResult",
]

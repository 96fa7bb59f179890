"""Query parameter models for listing and report calls.

Filters are immutable and never contain the page index, which is
supplied when a page is fetched. ``to_query_params`` always produces the
same ordered parameter list for equal filters: multi-valued parameters
are sorted and comma joined.
"""

from datetime import date
from typing import FrozenSet, List, Optional, Tuple

from pydantic import Field, field_validator

from .base_models import BaseApiModel
from .batches import ReportType
from .delivery_reports import DeliveryStatus

QueryParams = List[Tuple[str, str]]


def _join(values) -> str:
    return ",".join(sorted(str(v) for v in values))


class BatchFilter(BaseApiModel):
    """Filter for the batch listing.

    :param page_size: Maximum number of batches per page
    :type page_size: Optional[int]
    :param senders: Only batches sent from one of these originators
    :type senders: FrozenSet[str]
    :param start_date: Only batches created on or after this date
    :type start_date: Optional[date]
    :param end_date: Only batches created before this date
    :type end_date: Optional[date]
    :param tags: Only batches carrying one of these tags
    :type tags: FrozenSet[str]
    """

    page_size: Optional[int] = Field(None, ge=1)
    senders: FrozenSet[str] = frozenset()
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    tags: FrozenSet[str] = frozenset()

    def to_query_params(self) -> QueryParams:
        params: QueryParams = []
        if self.page_size is not None:
            params.append(("page_size", str(self.page_size)))
        if self.senders:
            params.append(("from", _join(self.senders)))
        if self.start_date is not None:
            params.append(("start_date", self.start_date.isoformat()))
        if self.end_date is not None:
            params.append(("end_date", self.end_date.isoformat()))
        if self.tags:
            params.append(("tags", _join(self.tags)))
        return params


class GroupFilter(BaseApiModel):
    """Filter for the group listing."""

    page_size: Optional[int] = Field(None, ge=1)
    tags: FrozenSet[str] = frozenset()

    def to_query_params(self) -> QueryParams:
        params: QueryParams = []
        if self.page_size is not None:
            params.append(("page_size", str(self.page_size)))
        if self.tags:
            params.append(("tags", _join(self.tags)))
        return params


class BatchDeliveryReportParams(BaseApiModel):
    """Options for fetching a batch delivery report.

    :param report_type: Summary or full report, server default if omitted
    :type report_type: Optional[ReportType]
    :param statuses: Only include these delivery statuses
    :type statuses: FrozenSet[DeliveryStatus]
    :param codes: Only include these status codes
    :type codes: FrozenSet[int]
    """

    report_type: Optional[ReportType] = None
    statuses: FrozenSet[DeliveryStatus] = frozenset()
    codes: FrozenSet[int] = frozenset()

    @field_validator("report_type")
    @classmethod
    def validate_report_type(cls, v: Optional[ReportType]) -> Optional[ReportType]:
        if v not in (None, ReportType.SUMMARY, ReportType.FULL):
            raise ValueError("delivery reports are either summary or full")
        return v

    def to_query_params(self) -> QueryParams:
        params: QueryParams = []
        if self.report_type is not None:
            params.append(("type", self.report_type.value))
        if self.statuses:
            params.append(("status", _join(s.value for s in self.statuses)))
        if self.codes:
            params.append(("code", ",".join(str(c) for c in sorted(self.codes))))
        return params

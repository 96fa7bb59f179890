"""Unit tests for listing filters and report parameters."""

from datetime import date

import pytest
from pydantic import ValidationError

from clx_xms.models import (
    BatchDeliveryReportParams,
    BatchFilter,
    DeliveryStatus,
    GroupFilter,
    ReportType,
)


class TestBatchFilter:
    def test_empty_filter_has_no_params(self):
        assert BatchFilter().to_query_params() == []

    def test_params_are_ordered_and_joined(self):
        flt = BatchFilter(
            page_size=50,
            senders=frozenset({"4567", "1234"}),
            start_date=date(2016, 10, 2),
            end_date=date(2016, 11, 1),
            tags=frozenset({"tag2", "tag1"}),
        )
        assert flt.to_query_params() == [
            ("page_size", "50"),
            ("from", "1234,4567"),
            ("start_date", "2016-10-02"),
            ("end_date", "2016-11-01"),
            ("tags", "tag1,tag2"),
        ]

    def test_equal_filters_give_equal_params(self):
        a = BatchFilter(tags=frozenset(["x", "y", "z"]))
        b = BatchFilter(tags=frozenset(["z", "y", "x"]))
        assert a == b
        assert a.to_query_params() == b.to_query_params()

    def test_page_size_must_be_positive(self):
        with pytest.raises(ValidationError):
            BatchFilter(page_size=0)


class TestGroupFilter:
    def test_params(self):
        flt = GroupFilter(page_size=10, tags=frozenset({"b", "a"}))
        assert flt.to_query_params() == [("page_size", "10"), ("tags", "a,b")]


class TestDeliveryReportParams:
    def test_params(self):
        params = BatchDeliveryReportParams(
            report_type=ReportType.FULL,
            statuses=frozenset({DeliveryStatus.DELIVERED, DeliveryStatus.ABORTED}),
            codes=frozenset({300, 200}),
        )
        assert params.to_query_params() == [
            ("type", "full"),
            ("status", "Aborted,Delivered"),
            ("code", "200,300"),
        ]

    def test_codes_sort_numerically(self):
        params = BatchDeliveryReportParams(codes=frozenset({1000, 200}))
        assert params.to_query_params() == [("code", "200,1000")]

    def test_default_is_empty(self):
        assert BatchDeliveryReportParams().to_query_params() == []

    @pytest.mark.parametrize("report_type", [ReportType.NONE, ReportType.PER_RECIPIENT])
    def test_only_summary_or_full(self, report_type):
        with pytest.raises(ValidationError):
            BatchDeliveryReportParams(report_type=report_type)

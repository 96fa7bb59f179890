"""Unit tests for API models and their JSON encoding."""

import json
from datetime import datetime, timezone

import pytest
from pydantic import TypeAdapter, ValidationError

from clx_xms.models import (
    AutoUpdate,
    BatchDeliveryReport,
    DeliveryStatus,
    GroupCreate,
    GroupUpdate,
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
    PagedGroupResult,
    ReportType,
    TagsUpdate,
    substitution,
)
from clx_xms.utils.codec import default_codec


def encoded(model):
    return json.loads(default_codec.encode(model))


class TestBatchCreate:
    def test_text_batch_wire_format(self):
        create = MtBatchTextSmsCreate(
            sender="12345",
            to=["987654321"],
            body="Hello, ${name}",
            parameters={"name": substitution(default="you", **{"987654321": "Jane"})},
            send_at=datetime(2016, 12, 1, 10, 20, tzinfo=timezone.utc),
            delivery_report=ReportType.SUMMARY,
        )

        assert encoded(create) == {
            "type": "mt_text",
            "from": "12345",
            "to": ["987654321"],
            "body": "Hello, ${name}",
            "parameters": {"name": {"987654321": "Jane", "default": "you"}},
            "send_at": "2016-12-01T10:20:00Z",
            "delivery_report": "summary",
        }

    def test_binary_batch_wire_format(self):
        create = MtBatchBinarySmsCreate(
            sender="12345",
            to=["987654321"],
            body=b"\x00\x01\x02\x03",
            udh=b"\xff\xfe\xfd",
        )

        assert encoded(create) == {
            "type": "mt_binary",
            "from": "12345",
            "to": ["987654321"],
            "body": "AAECAw==",
            "udh": "fffefd",
        }

    def test_recipients_required(self):
        with pytest.raises(ValidationError):
            MtBatchTextSmsCreate(sender="12345", to=[], body="hi")

    def test_blank_recipient_rejected(self):
        with pytest.raises(ValidationError):
            MtBatchTextSmsCreate(sender="12345", to=["123", " "], body="hi")

    def test_models_are_immutable(self):
        create = MtBatchTextSmsCreate(sender="12345", to=["987654321"], body="hi")
        with pytest.raises(ValidationError):
            create.body = "changed"


class TestBatchUpdate:
    def test_unset_fields_are_omitted(self):
        update = MtBatchTextSmsUpdate(body="new body", to_add=["123"])
        assert encoded(update) == {
            "type": "mt_text",
            "body": "new body",
            "to_add": ["123"],
        }

    def test_explicit_none_is_sent_as_null(self):
        update = MtBatchTextSmsUpdate(sender=None, callback_url=None)
        assert encoded(update) == {"type": "mt_text", "from": None, "callback_url": None}

    def test_update_variant_selected_by_type(self):
        update = TypeAdapter(MtBatchSmsUpdateVariant).validate_python(
            {"type": "mt_binary", "udh": "fffefd"}
        )
        assert isinstance(update, MtBatchBinarySmsUpdate)
        assert update.udh == b"\xff\xfe\xfd"

    def test_create_variant_rejects_unknown_type(self):
        with pytest.raises(ValidationError):
            TypeAdapter(MtBatchSmsCreateVariant).validate_python(
                {"type": "mt_media", "from": "12345", "to": ["987654321"], "body": "hi"}
            )


class TestBatchResult:
    def test_text_variant_selected_by_type(self, text_batch_json):
        result = default_codec.decode(json.dumps(text_batch_json), MtBatchSmsResult)
        assert isinstance(result, MtBatchTextSmsResult)
        assert result.sender == "12345"
        assert result.created_at == datetime(2016, 10, 2, 9, 34, 28, 542000, tzinfo=timezone.utc)

    def test_binary_variant_selected_by_type(self, binary_batch_json):
        result = default_codec.decode(json.dumps(binary_batch_json), MtBatchSmsResult)
        assert isinstance(result, MtBatchBinarySmsResult)
        assert result.body == b"\x00\x01\x02\x03"
        assert result.udh == b"\xff\xfe\xfd"
        assert result.canceled is True

    def test_unknown_type_rejected(self, text_batch_json):
        text_batch_json["type"] = "mt_media"
        with pytest.raises(ValidationError):
            default_codec.decode(json.dumps(text_batch_json), MtBatchSmsResult)

    def test_batch_page(self, text_batch_json, binary_batch_json):
        page = default_codec.decode(
            json.dumps(
                {
                    "page": 1,
                    "page_size": 2,
                    "count": 7,
                    "num_pages": 4,
                    "batches": [text_batch_json, binary_batch_json],
                }
            ),
            PagedBatchResult,
        )
        assert page.page == 1
        assert page.size == 2
        assert page.num_pages == 4
        assert [type(b) for b in page.content] == [MtBatchTextSmsResult, MtBatchBinarySmsResult]


class TestGroups:
    def test_group_update_wire_format(self):
        update = GroupUpdate(
            name=None,
            member_add=["123456789", "987654321"],
            member_remove=["555555555"],
            child_groups_add=["5678"],
            child_groups_remove=["9876"],
            add_from_group="3456",
            remove_from_group="5432",
            auto_update=AutoUpdate(
                to="1111",
                add_keyword_first="kw0",
                add_keyword_second="kw1",
                remove_keyword_first="kw2",
                remove_keyword_second="kw3",
            ),
        )

        assert encoded(update) == {
            "name": None,
            "add": ["123456789", "987654321"],
            "remove": ["555555555"],
            "child_groups_add": ["5678"],
            "child_groups_remove": ["9876"],
            "add_from_group": "3456",
            "remove_from_group": "5432",
            "auto_update": {
                "to": "1111",
                "add_keyword_first": "kw0",
                "add_keyword_second": "kw1",
                "remove_keyword_first": "kw2",
                "remove_keyword_second": "kw3",
            },
        }

    def test_empty_group_update(self):
        assert encoded(GroupUpdate()) == {}

    def test_group_create(self):
        create = GroupCreate(name="test", members=["123"], tags=["a"])
        assert encoded(create) == {
            "name": "test",
            "members": ["123"],
            "child_groups": [],
            "tags": ["a"],
        }

    def test_group_page(self, group_json):
        page = default_codec.decode(
            json.dumps({"page": 0, "page_size": 1, "num_pages": 1, "groups": [group_json]}),
            PagedGroupResult,
        )
        assert page.content[0].id == "4cldmgEdAcBfcHW3"
        assert page.content[0].size == 1


class TestMisc:
    def test_tags_update(self):
        assert encoded(TagsUpdate(add=["a"], remove=["b"])) == {"add": ["a"], "remove": ["b"]}

    def test_delivery_report(self):
        report = default_codec.decode(
            json.dumps(
                {
                    "type": "delivery_report_sms",
                    "batch_id": "3SD49KIOW8lL1Z5E",
                    "total_message_count": 2,
                    "statuses": [
                        {"code": 0, "status": "Delivered", "count": 2, "recipients": ["1", "2"]}
                    ],
                }
            ),
            BatchDeliveryReport,
        )
        assert report.statuses[0].status is DeliveryStatus.DELIVERED
        assert report.statuses[0].recipients == ["1", "2"]

    def test_api_error_decoding(self):
        error = default_codec.decode_error(b'{"code":"c","text":"t"}')
        assert (error.code, error.text) == ("c", "t")
        assert default_codec.decode_error(b"BAD") is None
        assert default_codec.decode_error(b"") is None

"""
Tests for record formatting utilities (utils.py).
"""

import base64
import json

import pytest

from dynamodb_backup.exceptions import FormatError, SerializationError, UnknownTypeTagError
from dynamodb_backup.utils import (
    build_object_key,
    get_data_pipeline_key,
    serialize_item,
    to_data_pipeline_format,
)


class TestDataPipelineKeys:
    """Type tag spelling for AWS Data Pipeline."""

    @pytest.mark.parametrize("tag,expected", [
        ('S', 's'),
        ('N', 'n'),
        ('B', 'b'),
        ('M', 'm'),
        ('L', 'l'),
        ('NULL', 'null'),
        ('BOOL', 'bOOL'),
        ('SS', 'sS'),
        ('NS', 'nS'),
        ('BS', 'bS'),
    ])
    def test_known_tags(self, tag, expected):
        assert get_data_pipeline_key(tag) == expected

    def test_unknown_tag_raises(self):
        with pytest.raises(UnknownTypeTagError, match="Unknown AttributeValue key: XYZ") as exc_info:
            get_data_pipeline_key('XYZ')

        assert exc_info.value.tag == 'XYZ'
        assert isinstance(exc_info.value, FormatError)

    def test_tags_are_case_sensitive(self):
        with pytest.raises(UnknownTypeTagError):
            get_data_pipeline_key('s')


class TestToDataPipelineFormat:
    """Item re-keying."""

    def test_scalar_and_set_attributes(self):
        item = {"id": {"S": "x"}, "tags": {"SS": ["a", "b"]}}

        result = to_data_pipeline_format(item)

        assert result == {"id": {"s": "x"}, "tags": {"sS": ["a", "b"]}}
        assert "S" not in result["id"]
        assert "SS" not in result["tags"]

    def test_nested_map_rekeyed_at_every_level(self):
        item = {"meta": {"M": {"flag": {"BOOL": True}}}}

        result = to_data_pipeline_format(item)

        assert result == {"meta": {"m": {"flag": {"bOOL": True}}}}

    def test_list_elements_rekeyed_in_order(self):
        item = {
            "history": {"L": [
                {"N": "1"},
                {"M": {"when": {"S": "today"}, "nums": {"NS": ["1", "2"]}}},
                {"NULL": True},
                {"L": [{"BS": [b"\x00"]}]},
            ]}
        }

        result = to_data_pipeline_format(item)

        assert result == {
            "history": {"l": [
                {"n": "1"},
                {"m": {"when": {"s": "today"}, "nums": {"nS": ["1", "2"]}}},
                {"null": True},
                {"l": [{"bS": [b"\x00"]}]},
            ]}
        }

    def test_attribute_order_preserved(self):
        item = {"z": {"S": "1"}, "a": {"N": "2"}, "m": {"B": b"3"}}

        result = to_data_pipeline_format(item)

        assert list(result) == ["z", "a", "m"]

    def test_input_not_mutated(self):
        item = {"meta": {"M": {"flag": {"BOOL": False}}}}
        snapshot = json.dumps(item)

        to_data_pipeline_format(item)

        assert json.dumps(item) == snapshot

    def test_unknown_nested_tag_fails_whole_item(self):
        item = {"ok": {"S": "x"}, "meta": {"M": {"bad": {"DATE": "2024-01-01"}}}}

        with pytest.raises(UnknownTypeTagError, match="DATE"):
            to_data_pipeline_format(item)

    def test_deep_nesting_does_not_recurse(self):
        depth = 5000
        item = {"leaf": {"S": "bottom"}}
        for _ in range(depth):
            item = {"child": {"M": item}}

        result = to_data_pipeline_format(item)

        node = result
        for _ in range(depth):
            node = node["child"]["m"]
        assert node == {"leaf": {"s": "bottom"}}

    def test_empty_item(self):
        assert to_data_pipeline_format({}) == {}


class TestSerializeItem:
    """JSON line rendering."""

    def test_single_compact_line(self):
        line = serialize_item({"id": {"S": "a\nb"}, "n": {"N": "1"}})

        assert "\n" not in line
        assert json.loads(line) == {"id": {"S": "a\nb"}, "n": {"N": "1"}}

    def test_non_ascii_kept_verbatim(self):
        line = serialize_item({"name": {"S": "Zoë"}})

        assert "Zoë" in line

    def test_binary_as_base64(self):
        payload = b"\x00\xffbinary"
        line = serialize_item(
            {"blob": {"B": payload}, "blobs": {"BS": [b"a", b"b"]}, "nested": {"M": {"b": {"B": payload}}}},
            base64_binary=True
        )

        decoded = json.loads(line)
        assert base64.b64decode(decoded["blob"]["B"]) == payload
        assert decoded["blobs"]["BS"] == [base64.b64encode(b"a").decode(), base64.b64encode(b"b").decode()]
        assert base64.b64decode(decoded["nested"]["M"]["b"]["B"]) == payload

    def test_binary_as_byte_values(self):
        line = serialize_item({"blob": {"B": b"\x01\x02"}}, base64_binary=False)

        assert json.loads(line) == {"blob": {"B": [1, 2]}}

    def test_unserializable_value_raises(self):
        with pytest.raises(SerializationError, match="Failed to serialize item"):
            serialize_item({"bad": {"S": object()}})


class TestBuildObjectKey:

    def test_joins_path_and_table(self):
        assert build_object_key("DynamoDB-backup-2024-01-01-00-00-00", "users") == \
            "DynamoDB-backup-2024-01-01-00-00-00/users.json"

    def test_trailing_slash(self):
        assert build_object_key("backups/", "users") == "backups/users.json"

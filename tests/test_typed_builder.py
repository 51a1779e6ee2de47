"""Tests for jsonsettings.typed_builder."""

import json
from datetime import datetime
from typing import Optional

import pytest

from jsonsettings.convert import IsoDateTimeConverter
from jsonsettings.errors import SettingsError, SettingsParseError
from jsonsettings.typed import (
    DefaultValueHandling,
    NullValueHandling,
    SerializerOptions,
    TypedSettings,
    setting,
)
from jsonsettings.typed_builder import FileNotFoundBehavior, TypedSettingsBuilder


class ExampleSettings(TypedSettings):
    test_string: Optional[str] = None
    dont_include_me: bool = setting(ignore=True, zero=False)
    default_true: bool = setting(True, zero=False)
    started: Optional[datetime] = None


@pytest.fixture
def path(tmp_path):
    return tmp_path / "ExampleSettings.json"


@pytest.fixture
def builder(path):
    return TypedSettingsBuilder.from_file(ExampleSettings, path)


class TestConstruction:
    def test_default_options(self, builder):
        options = builder.serializer_options
        assert options.default_value_handling is DefaultValueHandling.POPULATE
        assert options.null_value_handling is NullValueHandling.INCLUDE
        assert options.indented
        assert builder.not_found_behavior is FileNotFoundBehavior.RETURN_NULL

    def test_from_file_joins_parts(self, tmp_path):
        builder = TypedSettingsBuilder.from_file(ExampleSettings, tmp_path, "sub", "s.json")
        assert builder.file_location == tmp_path / "sub" / "s.json"

    def test_from_file_needs_a_path(self):
        with pytest.raises(ValueError):
            TypedSettingsBuilder.from_file(ExampleSettings)

    def test_no_location(self):
        builder = TypedSettingsBuilder(ExampleSettings)
        with pytest.raises(SettingsError, match="no file location"):
            builder.build()


class TestCreateDefault:
    def test_populates_declared_defaults(self, builder, path):
        s = builder.create_default()
        assert s.default_true is True
        assert s.test_string is None
        assert s.is_bound
        assert s.file_location == path
        assert not path.exists()

    def test_without_populate_keeps_zero_values(self, builder):
        s = builder.with_default_value_handling(DefaultValueHandling.IGNORE).create_default()
        assert s.default_true is False

    def test_ignore_and_populate(self, builder):
        s = (builder.with_default_value_handling(DefaultValueHandling.IGNORE_AND_POPULATE)
             .create_default())
        assert s.default_true is True

    def test_save_then_build(self, builder, path):
        builder.create_default().save()
        assert json.loads(path.read_text(encoding="utf-8")) == {
            "test_string": None,
            "default_true": True,
            "started": None,
        }
        s = builder.build()
        assert s.default_true is True
        assert s.exists()

    def test_records_get_their_own_options(self, builder):
        s = builder.create_default()
        builder.with_null_value_handling(NullValueHandling.IGNORE)
        assert s.serializer_options.null_value_handling is NullValueHandling.INCLUDE
        assert s.serializer_options is not builder.serializer_options


class TestBuild:
    def test_missing_file_return_default(self, builder, path):
        s = builder.with_file_not_found_behavior(FileNotFoundBehavior.RETURN_DEFAULT).build()
        assert s is not None
        assert s.default_true is True
        assert not path.exists()

    def test_missing_file_return_null(self, builder):
        assert builder.with_file_not_found_behavior(FileNotFoundBehavior.RETURN_NULL).build() is None

    def test_existing_file(self, builder, path):
        path.write_text('{"test_string": "hi", "default_true": false}', encoding="utf-8")
        s = builder.build()
        assert s.test_string == "hi"
        assert s.default_true is False
        assert s.file_location == path
        assert s.is_bound

    def test_existing_file_populates_missing(self, builder, path):
        path.write_text('{"test_string": "hi"}', encoding="utf-8")
        assert builder.build().default_true is True

    def test_existing_file_without_populate(self, builder, path):
        path.write_text('{"test_string": "hi"}', encoding="utf-8")
        s = builder.with_default_value_handling(DefaultValueHandling.INCLUDE).build()
        assert s.default_true is False

    def test_parse_error(self, builder, path):
        path.write_text("{broken", encoding="utf-8")
        with pytest.raises(SettingsParseError, match="ExampleSettings.json"):
            builder.build()

    def test_schema_mismatch(self, builder, path):
        path.write_text('{"default_true": "sometimes"}', encoding="utf-8")
        with pytest.raises(SettingsParseError, match="default_true"):
            builder.build()

    def test_save_uses_bound_options(self, builder, path):
        path.write_text('{"test_string": null}', encoding="utf-8")
        s = builder.with_null_value_handling(NullValueHandling.IGNORE).build()
        s.save()
        assert json.loads(path.read_text(encoding="utf-8")) == {"default_true": True}

    def test_save_overwrites(self, builder, path):
        path.write_text('{"test_string": "old"}', encoding="utf-8")
        s = builder.build()
        s.test_string = "new"
        s.save()
        assert builder.build().test_string == "new"


class TestOptions:
    def test_json_converter(self, builder, path):
        s = builder.with_json_converter(IsoDateTimeConverter("%Y%m%d")).create_default()
        s.started = datetime(2024, 2, 29)
        s.save()
        assert json.loads(path.read_text(encoding="utf-8"))["started"] == "20240229"
        assert builder.build().started == datetime(2024, 2, 29)

    def test_replacing_options_discards_earlier_edits(self, builder):
        builder.with_null_value_handling(NullValueHandling.IGNORE)
        builder.with_json_converter(IsoDateTimeConverter())
        builder.with_serializer_options(SerializerOptions())
        assert builder.serializer_options.null_value_handling is NullValueHandling.INCLUDE
        assert builder.serializer_options.converters == []

    def test_edits_after_replacement_apply(self, builder):
        options = SerializerOptions(indented=False)
        builder.with_serializer_options(options).with_null_value_handling(NullValueHandling.IGNORE)
        assert options.null_value_handling is NullValueHandling.IGNORE

    def test_compact_output(self, builder, path):
        builder.with_serializer_options(SerializerOptions(indented=False)).create_default().save()
        assert path.read_text(encoding="utf-8") == (
            '{"test_string": null, "default_true": true, "started": null}\n'
        )


class TestEncoding:
    def test_byte_order_mark(self, builder, path):
        path.write_bytes(b'\xef\xbb\xbf{"test_string": "bom"}')
        assert builder.build().test_string == "bom"

    def test_not_utf8(self, builder, path):
        path.write_text('{"test_string": "x"}', encoding="utf-16")
        with pytest.raises(SettingsParseError, match="UTF-8"):
            builder.build()

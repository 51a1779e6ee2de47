"""Tests for jsonsettings.main."""

import json
import runpy
import sys

import pytest

from jsonsettings.main import build_parser, main


@pytest.fixture
def settings_file(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"theme": "dark", "retries": 3}), encoding="utf-8")
    return path


class TestShow:
    def test_prints_document(self, settings_file, capsys):
        assert main(["show", str(settings_file)]) == 0
        assert json.loads(capsys.readouterr().out) == {"theme": "dark", "retries": 3}

    def test_missing_file(self, tmp_path, caplog):
        assert main(["show", str(tmp_path / "nope.json")]) == 1
        assert "No settings file was located" in caplog.text


class TestGet:
    def test_prints_value(self, settings_file, capsys):
        assert main(["get", str(settings_file), "retries"]) == 0
        assert capsys.readouterr().out.strip() == "3"

    def test_missing_key(self, settings_file, caplog):
        assert main(["get", str(settings_file), "nope"]) == 1
        assert "no entry with key nope" in caplog.text


class TestSet:
    def test_json_value(self, settings_file):
        assert main(["set", str(settings_file), "retries", "5"]) == 0
        assert json.loads(settings_file.read_text(encoding="utf-8"))["retries"] == 5

    def test_plain_string_value(self, settings_file):
        main(["set", str(settings_file), "theme", "light"])
        assert json.loads(settings_file.read_text(encoding="utf-8"))["theme"] == "light"

    def test_creates_file(self, tmp_path):
        path = tmp_path / "new.json"
        assert main(["set", str(path), "flags", '{"a": true}']) == 0
        assert json.loads(path.read_text(encoding="utf-8")) == {"flags": {"a": True}}

    def test_data_dir(self, tmp_path):
        assert main(["--data-dir", str(tmp_path / "data"), "set", "ui", "zoom", "1.5"]) == 0
        path = tmp_path / "data" / "config" / "ui.json"
        assert json.loads(path.read_text(encoding="utf-8")) == {"zoom": 1.5}

    def test_bad_json_file(self, tmp_path, caplog):
        path = tmp_path / "broken.json"
        path.write_text("{", encoding="utf-8")
        assert main(["set", str(path), "a", "1"]) == 1
        assert "invalid JSON" in caplog.text


class TestUnset:
    def test_removes_key(self, settings_file):
        assert main(["unset", str(settings_file), "theme"]) == 0
        assert json.loads(settings_file.read_text(encoding="utf-8")) == {"retries": 3}

    def test_missing_key(self, settings_file):
        assert main(["unset", str(settings_file), "nope"]) == 1


class TestParser:
    def test_requires_command(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_verbose_flag(self):
        args = build_parser().parse_args(["-v", "show", "f.json"])
        assert args.verbose
        assert args.command == "show"


class TestModuleEntryPoint:
    def test_run_as_module(self, settings_file, monkeypatch, capsys):
        monkeypatch.setattr(sys, "argv", ["jsonsettings", "get", str(settings_file), "retries"])
        with pytest.raises(SystemExit) as exc:
            runpy.run_module("jsonsettings", run_name="__main__")
        assert exc.value.code == 0
        assert capsys.readouterr().out.strip() == "3"

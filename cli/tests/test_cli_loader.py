"""
Tests for cli/elementary_cli/loader.py
"""

from __future__ import annotations

import json

import pytest

from elementary_cli.loader import ViewsFileError, load_model, load_views


def write(tmp_path, name, content):
    path = tmp_path / name
    path.write_text(content if isinstance(content, str) else json.dumps(content))
    return path


class TestLoadViews:
    def test_entries_kept_as_json(self, tmp_path):
        spec = {"tag": "p", "children": [{"text": "hi"}]}
        views = load_views(write(tmp_path, "v.json", {"main": {"view": spec}}))
        assert views == {"main": {"view": spec}}

    def test_extra_keys_kept(self, tmp_path):
        views = load_views(write(tmp_path, "v.json", {"main": {"view": [], "title": "Main"}}))
        assert views["main"]["title"] == "Main"

    def test_null_view_allowed(self, tmp_path):
        assert load_views(write(tmp_path, "v.json", {"main": {"view": None}})) == {"main": {"view": None}}

    def test_entry_without_view(self, tmp_path):
        with pytest.raises(ViewsFileError, match="not a views file"):
            load_views(write(tmp_path, "v.json", {"main": {"spec": {}}}))

    def test_not_an_object(self, tmp_path):
        with pytest.raises(ViewsFileError):
            load_views(write(tmp_path, "v.json", ["main"]))

    def test_invalid_json(self, tmp_path):
        with pytest.raises(ViewsFileError, match="invalid JSON"):
            load_views(write(tmp_path, "v.json", "{nope"))

    def test_missing_file(self, tmp_path):
        with pytest.raises(ViewsFileError, match="no such file"):
            load_views(tmp_path / "absent.json")


class TestLoadModel:
    def test_none_is_empty(self):
        assert load_model(None) == {}

    def test_object(self, tmp_path):
        assert load_model(write(tmp_path, "m.json", {"a": 1})) == {"a": 1}

    def test_must_be_object(self, tmp_path):
        with pytest.raises(ViewsFileError, match="must be a JSON object"):
            load_model(write(tmp_path, "m.json", [1, 2]))

"""Unit tests for CLI parameter parsing."""

import json

import pytest

from godot_bridge.utils import parse_params

pytestmark = [pytest.mark.cli_unit]


class TestParseParams:
    """Tests for parse_params."""

    def test_no_params(self):
        assert parse_params((), None) == {}

    def test_flags_parse_json_values(self):
        params = parse_params(
            ("node_type=Node2D", "count=3", "visible=true", 'position={"x": 1, "y": 2}'),
            None,
        )
        assert params == {
            "node_type": "Node2D",
            "count": 3,
            "visible": True,
            "position": {"x": 1, "y": 2},
        }

    def test_value_may_contain_equals(self):
        assert parse_params(("expr=a=b",), None) == {"expr": "a=b"}

    def test_invalid_flag(self):
        with pytest.raises(ValueError, match="Expected KEY=VALUE"):
            parse_params(("novalue",), None)

    def test_json_file(self, tmp_path):
        path = tmp_path / "params.json"
        path.write_text(json.dumps({"parent_path": "/root", "node_type": "Sprite2D"}))

        assert parse_params((), str(path)) == {"parent_path": "/root", "node_type": "Sprite2D"}

    def test_yaml_file_with_flag_override(self, tmp_path):
        path = tmp_path / "params.yaml"
        path.write_text("parent_path: /root\nnode_type: Sprite2D\n")

        params = parse_params(("node_type=Node3D",), str(path))

        assert params == {"parent_path": "/root", "node_type": "Node3D"}

    def test_unsupported_file(self, tmp_path):
        path = tmp_path / "params.txt"
        path.write_text("x")

        with pytest.raises(ValueError, match="Unsupported params file format"):
            parse_params((), str(path))

    def test_file_must_be_mapping(self, tmp_path):
        path = tmp_path / "params.json"
        path.write_text("[1, 2]")

        with pytest.raises(ValueError, match="must contain a mapping"):
            parse_params((), str(path))

"""Tests for config file loading and saving."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import pytest

from mdns_responder.config.loader import (
    default_config_path,
    load_config,
    parse_config,
    save_config,
)
from mdns_responder.config.models import default_config
from mdns_responder.errors import ConfigError, ConfigErrorKind, ExitCode


def _write(path: Path, data: Any) -> Path:
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


class TestLoadConfig:
    def test_loads_sample(self, config_file: Path) -> None:
        config = load_config(config_file)
        assert config.instance_name == "Office-PC"
        assert config.port == 445
        assert config.shares[0].name == "Public"

    def test_not_found(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError) as exc_info:
            load_config(tmp_path / "missing.json")
        assert exc_info.value.kind is ConfigErrorKind.NOT_FOUND
        assert exc_info.value.exit_code == ExitCode.CONFIG

    def test_directory_is_not_found(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError) as exc_info:
            load_config(tmp_path)
        assert exc_info.value.kind is ConfigErrorKind.NOT_FOUND

    def test_malformed_json(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigError) as exc_info:
            load_config(path)
        assert exc_info.value.kind is ConfigErrorKind.MALFORMED
        assert exc_info.value.code == "CONFIG_MALFORMED"

    def test_invalid_utf8_is_malformed(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_bytes(b'{"port": "\xff"}')
        with pytest.raises(ConfigError) as exc_info:
            load_config(path)
        assert exc_info.value.kind is ConfigErrorKind.MALFORMED

    def test_non_object_is_malformed(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "config.json", [1, 2, 3])
        with pytest.raises(ConfigError) as exc_info:
            load_config(path)
        assert exc_info.value.kind is ConfigErrorKind.MALFORMED

    def test_port_zero_invalid(self, tmp_path: Path, sample_data: dict[str, Any]) -> None:
        path = _write(tmp_path / "config.json", {**sample_data, "port": 0})
        with pytest.raises(ConfigError) as exc_info:
            load_config(path)
        err = exc_info.value
        assert err.kind is ConfigErrorKind.INVALID
        assert err.field == "port"
        assert "port" in err.message


class TestParseConfig:
    @pytest.mark.parametrize(
        "field",
        ["service_name", "instance_name", "port", "hostname", "workgroup", "description", "shares"],
    )
    def test_missing_required_field(self, sample_data: dict[str, Any], field: str) -> None:
        sample_data.pop(field)
        with pytest.raises(ConfigError) as exc_info:
            parse_config(sample_data)
        assert exc_info.value.field == field
        assert exc_info.value.message == f"missing required field '{field}'"
        assert exc_info.value.kind is ConfigErrorKind.INVALID

    @pytest.mark.parametrize("field", ["path", "comment"])
    def test_missing_share_field(self, sample_data: dict[str, Any], field: str) -> None:
        sample_data["shares"][0].pop(field)
        with pytest.raises(ConfigError) as exc_info:
            parse_config(sample_data)
        assert exc_info.value.kind is ConfigErrorKind.INVALID
        assert exc_info.value.field == f"shares[0].{field}"

    def test_boolean_port_invalid(self, sample_data: dict[str, Any]) -> None:
        with pytest.raises(ConfigError) as exc_info:
            parse_config({**sample_data, "port": True})
        assert exc_info.value.field == "port"

    def test_first_error_wins(self, sample_data: dict[str, Any]) -> None:
        data = {**sample_data, "port": 70000, "hostname": "bad host"}
        with pytest.raises(ConfigError) as exc_info:
            parse_config(data)
        assert exc_info.value.field == "port"

    def test_share_error_location(self, sample_data: dict[str, Any]) -> None:
        shares = [
            {"name": "ok", "path": "/srv/ok", "comment": ""},
            {"name": "", "path": "/srv/x", "comment": ""},
        ]
        data = {**sample_data, "shares": shares}
        with pytest.raises(ConfigError) as exc_info:
            parse_config(data)
        assert exc_info.value.field == "shares[1].name"

    def test_error_detail_carries_path(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError) as exc_info:
            parse_config({}, path=tmp_path / "c.json")
        assert exc_info.value.detail["path"] == tmp_path / "c.json"


class TestSaveConfig:
    def test_save_then_load(self, tmp_path: Path) -> None:
        path = save_config(default_config(), tmp_path / "nested" / "config.json")
        assert path.is_file()
        assert load_config(path) == default_config()

    def test_writes_file_keys(self, tmp_path: Path) -> None:
        path = save_config(default_config(), tmp_path / "config.json")
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["service_name"] == "_smb._tcp.local."
        assert "service_type" not in data
        assert "bind_address" not in data


class TestDefaultPath:
    def test_platform_location(self) -> None:
        path = default_config_path()
        assert path.name == "config.json"
        if sys.platform == "win32":
            assert "MDNSResponder" in str(path)
        else:
            assert path == Path("/etc/mdns-responder/config.json")

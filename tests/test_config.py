from __future__ import annotations

from pathlib import Path

import pytest

from adbmux.core.config import DEFAULT_RECORD_REMOTE_PATH, Config, config_validator, load_config
from adbmux.core.errors import ConfigurationMissingError, ConfigValidationError


def _write_config(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def test_missing_default_file_yields_defaults(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))

    config = load_config()

    assert config == Config()
    assert config.adb_path == "adb"
    assert config.record_remote_path == DEFAULT_RECORD_REMOTE_PATH


def test_load_from_xdg_location(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
    path = tmp_path / "cfg" / "adbmux" / "config.yaml"
    _write_config(
        path,
        """
adb_path: /opt/platform-tools/adb
scrcpy_dir: /opt/scrcpy
""",
    )

    config = load_config()

    assert config.adb_path == "/opt/platform-tools/adb"
    assert config.require_scrcpy_dir() == "/opt/scrcpy"
    assert config.source == path


def test_empty_file_uses_defaults(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    _write_config(path, "")

    config = load_config(path)

    assert config.adb_path == "adb"
    assert config.source == path


def test_explicit_missing_path_rejected(tmp_path: Path) -> None:
    with pytest.raises(ConfigValidationError):
        load_config(tmp_path / "nope.yaml")


def test_unknown_key_rejected(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    _write_config(path, "scrcpy_path: /opt/scrcpy\n")

    with pytest.raises(ConfigValidationError) as exc:
        load_config(path)

    assert "scrcpy_path" in str(exc.value)


def test_relative_record_path_rejected(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    _write_config(path, "record_remote_path: sdcard/rec.mp4\n")

    with pytest.raises(ConfigValidationError):
        load_config(path)


def test_duplicate_keys_rejected(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    _write_config(path, "adb_path: adb\nadb_path: /usr/bin/adb\n")

    with pytest.raises(ConfigValidationError):
        load_config(path)


def test_non_mapping_root_rejected(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    _write_config(path, "- adb\n")

    with pytest.raises(ConfigValidationError):
        load_config(path)


def test_missing_scrcpy_dir_names_setting_and_file(tmp_path: Path) -> None:
    config = Config(source=tmp_path / "config.yaml")

    with pytest.raises(ConfigurationMissingError) as exc:
        config.require_scrcpy_dir()

    assert "scrcpy_dir" in str(exc.value)
    assert str(tmp_path / "config.yaml") in str(exc.value)


def test_duplicate_key_message_names_lines(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    _write_config(path, "adb_path: adb\nscrcpy_dir: /opt/scrcpy\nadb_path: /usr/bin/adb\n")

    with pytest.raises(ConfigValidationError) as exc:
        load_config(path)

    assert "'adb_path' is repeated on line 3 (first set on line 1)" in str(exc.value)


def test_malformed_yaml_rejected(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    _write_config(path, "adb_path: [unclosed\n")

    with pytest.raises(ConfigValidationError) as exc:
        load_config(path)

    assert "Invalid YAML" in str(exc.value)


def test_schema_error_names_setting(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    _write_config(path, "scrcpy_dir: ''\n")

    with pytest.raises(ConfigValidationError) as exc:
        load_config(path)

    assert "at 'scrcpy_dir'" in str(exc.value)


def test_schema_validator_is_built_once() -> None:
    assert config_validator() is config_validator()

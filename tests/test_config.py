# Copyright (C) 2025 Intel Corporation
# SPDX-License-Identifier: Apache-2.0

"""
Tests for settings loading and environment overrides.
"""

import os

import pytest

from sysspector.utils.config import (
    ConfigurationError,
    get_config_value,
    get_default_config_path,
    get_project_name,
    load_settings,
    merge_configs,
    set_config_value,
)
from sysspector.utils.config.config import CONFIG_ENV_VAR


def test_packaged_defaults():
    assert os.path.isfile(get_default_config_path())

    settings = load_settings()

    assert get_config_value(settings, "network.latency.ping_count") == 5
    assert get_config_value(settings, "commands.max_execution_time") == 300
    assert get_config_value(settings, "output.text_file") == "sysinfo.txt"
    assert [t["host"] for t in get_config_value(settings, "network.latency.targets")] == [
        "8.8.8.8",
        "1.1.1.1",
        "www.baidu.com",
    ]


def test_user_file_is_merged(tmp_path):
    config = tmp_path / "settings.yml"
    config.write_text("network:\n  latency:\n    enabled: false\nsoftware:\n  process_limit: 10\n", encoding="utf-8")

    settings = load_settings(str(config))

    assert get_config_value(settings, "network.latency.enabled") is False
    assert get_config_value(settings, "network.latency.ping_count") == 5
    assert get_config_value(settings, "software.process_limit") == 10
    assert get_config_value(settings, "network.http_timeout") == 5


def test_config_path_from_environment(tmp_path, monkeypatch):
    config = tmp_path / "env.yml"
    config.write_text("network:\n  http_timeout: 2\n", encoding="utf-8")
    monkeypatch.setenv(CONFIG_ENV_VAR, str(config))

    assert get_config_value(load_settings(), "network.http_timeout") == 2


def test_missing_user_file(tmp_path):
    with pytest.raises(ConfigurationError, match="not found"):
        load_settings(str(tmp_path / "absent.yml"))


def test_invalid_yaml(tmp_path):
    config = tmp_path / "broken.yml"
    config.write_text("network: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        load_settings(str(config))


def test_user_file_must_be_a_mapping(tmp_path):
    config = tmp_path / "list.yml"
    config.write_text("- a\n- b\n", encoding="utf-8")

    with pytest.raises(ConfigurationError, match="mapping"):
        load_settings(str(config))


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("SYSSPECTOR_PING_COUNT", "7")
    monkeypatch.setenv("SYSSPECTOR_TRACE", "off")
    monkeypatch.setenv("SYSSPECTOR_HTTP_TIMEOUT", "2.5")

    settings = load_settings()

    assert get_config_value(settings, "network.latency.ping_count") == 7
    assert get_config_value(settings, "network.trace.enabled") is False
    assert get_config_value(settings, "network.http_timeout") == 2.5
    assert get_config_value(settings, "network.latency.targets")


def test_invalid_environment_value_is_ignored(monkeypatch, caplog):
    monkeypatch.setenv("SYSSPECTOR_PING_COUNT", "many")

    settings = load_settings()

    assert get_config_value(settings, "network.latency.ping_count") == 5
    assert "Ignoring invalid value for SYSSPECTOR_PING_COUNT" in caplog.text


def test_merge_and_dot_notation_helpers():
    base = {"a": {"b": 1, "c": 2}, "d": 3}

    merged = merge_configs(base, {"a": {"b": 10}, "e": 4})
    set_config_value(merged, "x.y.z", "deep")

    assert merged == {"a": {"b": 10, "c": 2}, "d": 3, "e": 4, "x": {"y": {"z": "deep"}}}
    assert base == {"a": {"b": 1, "c": 2}, "d": 3}
    assert get_config_value(merged, "a.missing", "fallback") == "fallback"
    assert get_config_value(merged, "d.deeper", "fallback") == "fallback"


def test_project_name():
    assert get_project_name() == "sysspector"

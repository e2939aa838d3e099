# Copyright (C) 2025 Intel Corporation
# SPDX-License-Identifier: Apache-2.0

"""
Tests for the command line entry point and the info command.
"""

import json
import logging

import pytest

from sysspector.cli import main
from sysspector.utils.cli import create_argument_parser
from sysspector.utils.cli.commands import get_command_function
from sysspector.utils.cli.commands import info
from sysspector.utils.system import UnsupportedPlatformError


@pytest.fixture
def collected(monkeypatch, fake_executor, sample_report):
    """Make the info command return the sample report without collecting."""
    calls = []

    def fake_collect(settings):
        calls.append(settings)
        return sample_report, ["Failed to collect bluetooth: timed out"]

    monkeypatch.setattr(info, "collect_system_report", fake_collect)
    return calls


def test_parser_defaults():
    args = create_argument_parser().parse_args([])

    assert args.save is None
    assert not args.json
    assert not args.apps
    assert not args.processes
    assert not args.no_pause


def test_parser_save_without_file():
    parser = create_argument_parser()

    assert parser.parse_args(["--save"]).save == ""
    assert parser.parse_args(["--save", "out.json", "--json"]).save == "out.json"


def test_unknown_command_function():
    with pytest.raises(ValueError, match="Unknown command"):
        get_command_function("run_benchmarks")


def test_prints_text_report(collected, capsys):
    assert main(["--no-pause"]) == 0

    out = capsys.readouterr().out
    assert "SYSTEM INFORMATION" in out
    assert "Café-MacBook" in out
    assert "{" not in out
    assert collected[0]["network"]["latency"]["ping_count"] == 5


def test_json_flag_prints_json_after_report(collected, capsys):
    assert main(["--json", "--no-pause"]) == 0

    out = capsys.readouterr().out
    report_text, json_text = out.split("\n\n{", 1)
    assert "SYSTEM INFORMATION" in report_text
    assert json.loads("{" + json_text)["identity"]["model_id"] == "MacBookPro18,3"


def test_save_json(collected, sample_report, tmp_path):
    output = tmp_path / "out.json"

    assert main(["--save", str(output), "--no-pause"]) == 0

    assert json.loads(output.read_text(encoding="utf-8")) == sample_report.to_dict()


def test_save_text_summary(collected, tmp_path):
    output = tmp_path / "summary.txt"

    assert main(["--save", str(output), "--no-pause"]) == 0

    lines = output.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 8
    assert lines[0].startswith("Hostname:")


def test_save_default_file_names(collected, monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)

    assert main(["--save", "--no-pause"]) == 0
    assert main(["--save", "--json", "--no-pause"]) == 0

    assert len((tmp_path / "sysinfo.txt").read_text(encoding="utf-8").splitlines()) == 8
    assert json.loads((tmp_path / "sysinfo.json").read_text(encoding="utf-8"))["identity"]["hostname"] == "Café-MacBook"


def test_save_to_missing_directory_fails(collected, tmp_path, caplog):
    with caplog.at_level(logging.ERROR):
        result = main(["--save", str(tmp_path / "missing" / "out.json"), "--no-pause"])

    assert result == 1
    assert "Error saving report" in caplog.text


def test_missing_config_file_fails(collected, tmp_path, caplog):
    with caplog.at_level(logging.ERROR):
        result = main(["--config", str(tmp_path / "absent.yml"), "--no-pause"])

    assert result == 1
    assert "Invalid configuration" in caplog.text
    assert collected == []


def test_config_file_reaches_collection(collected, tmp_path):
    config = tmp_path / "settings.yml"
    config.write_text("network:\n  latency:\n    ping_count: 2\n", encoding="utf-8")

    assert main(["--config", str(config), "--no-pause"]) == 0
    assert collected[0]["network"]["latency"]["ping_count"] == 2


def test_unsupported_operating_system(monkeypatch, fake_executor, caplog):
    def unsupported(settings):
        raise UnsupportedPlatformError("Unsupported operating system: Plan9")

    monkeypatch.setattr(info, "collect_system_report", unsupported)

    with caplog.at_level(logging.ERROR):
        result = main(["--no-pause"])

    assert result == 1
    assert "Unsupported operating system: Plan9" in caplog.text


def test_unexpected_collection_error(monkeypatch, fake_executor, caplog):
    def broken(settings):
        raise RuntimeError("collector crashed")

    monkeypatch.setattr(info, "collect_system_report", broken)

    with caplog.at_level(logging.ERROR):
        result = main(["--no-pause"])

    assert result == 1
    assert "Error collecting system information: collector crashed" in caplog.text


def test_keyboard_interrupt(monkeypatch, fake_executor):
    def interrupted(settings):
        raise KeyboardInterrupt

    monkeypatch.setattr(info, "collect_system_report", interrupted)

    assert main(["--no-pause"]) == 130


def test_log_file_receives_debug_messages(collected, tmp_path):
    log_file = tmp_path / "logs" / "sysspector.log"

    assert main(["--log-file", str(log_file), "--no-pause"]) == 0

    for handler in logging.getLogger().handlers:
        handler.flush()
    assert "Failed to collect bluetooth: timed out" in log_file.read_text(encoding="utf-8")


def test_resolve_output_path():
    settings = {"output": {"text_file": "custom.txt", "json_file": "custom.json"}}

    assert info.resolve_output_path("report.json", False, settings) == "report.json"
    assert info.resolve_output_path("", False, settings) == "custom.txt"
    assert info.resolve_output_path("", True, settings) == "custom.json"
    assert info.resolve_output_path("", True, {}) == "sysinfo.json"


class FakeStdin:
    def __init__(self, tty):
        self.tty = tty

    def isatty(self):
        return self.tty


def test_should_pause_only_in_windows_console(monkeypatch):
    monkeypatch.setattr(info.platform, "system", lambda: "Windows")
    monkeypatch.setattr(info.sys, "stdin", FakeStdin(True))

    assert info.should_pause(False)
    assert not info.should_pause(True)
    assert not info.should_pause(False, {"output": {"pause_on_windows": False}})

    monkeypatch.setattr(info.sys, "stdin", FakeStdin(False))
    assert not info.should_pause(False)

    monkeypatch.setattr(info.sys, "stdin", FakeStdin(True))
    monkeypatch.setattr(info.platform, "system", lambda: "Darwin")
    assert not info.should_pause(False)


def test_pause_before_exit_without_input(monkeypatch):
    def no_input(prompt):
        raise EOFError

    monkeypatch.setattr("builtins.input", no_input)

    info.pause_before_exit()

# Copyright (C) 2025 Intel Corporation
# SPDX-License-Identifier: Apache-2.0

"""
Tests for the process runner, field extraction and provider chains.
"""

import subprocess

from sysspector.utils.core import process
from sysspector.utils.core import (
    CommandSpec,
    FieldRule,
    ProcessExecutor,
    assign_fields,
    command_output,
    extract_fields,
    find_all,
    first_available,
    first_available_with_source,
    run_extraction,
    run_extractions,
    to_float,
    to_int,
)
from sysspector.utils.system.models import IdentityInfo


def test_missing_binary_returns_failed_result():
    """A command that does not exist is reported, never raised."""
    result = ProcessExecutor().run(["sysspector-no-such-command", "--version"])

    assert result.failed
    assert result.not_found
    assert result.returncode == 127


def test_string_commands_are_split():
    assert ProcessExecutor()._prepare_command("ping -c 5 8.8.8.8") == ["ping", "-c", "5", "8.8.8.8"]


def test_commands_run_with_c_locale(monkeypatch):
    captured = {}

    def fake_run(cmd_list, **kwargs):
        captured.update(kwargs)
        return subprocess.CompletedProcess(cmd_list, 0, stdout="ok\n", stderr="")

    monkeypatch.delenv("LC_ALL", raising=False)
    monkeypatch.setattr(process.subprocess, "run", fake_run)

    result = ProcessExecutor(max_execution_time=9).run(["sw_vers"])

    assert result.success
    assert result.stdout == "ok\n"
    assert captured["env"]["LC_ALL"] == "C"
    assert captured["timeout"] == 9
    assert "input" not in captured


def test_command_output_is_none_on_failure(fake_executor):
    fake_executor.add(["sysctl", "-n", "hw.model"], stdout="MacBookPro18,3\n")
    fake_executor.add(["pmset"], returncode=1, stderr="boom")

    assert command_output(["sysctl", "-n", "hw.model"]) == "MacBookPro18,3\n"
    assert command_output(["pmset", "-g", "batt"]) is None
    assert command_output(["not-registered"]) is None


def test_converters():
    assert to_int("1,024 MB") == 1024
    assert to_int("channel 36,80") == 36
    assert to_float("Temp: 45.5 C") == 45.5


def test_first_matching_rule_wins():
    """Alternative patterns for the same field are tried in order."""
    rules = (
        FieldRule("version", r"^Version:\s*(.+)$"),
        FieldRule("version", r"^Build:\s*(.+)$"),
        FieldRule("count", r"^Count:\s*(\S+)", to_int),
    )
    text = "Build: 23C71\nVersion: 14.2\nCount: many\n"

    values = extract_fields(text, rules)

    assert values == {"version": "14.2"}


def test_extract_fields_on_empty_text():
    assert extract_fields("", (FieldRule("x", r"(.+)"),)) == {}


def test_assign_fields_ignores_unknown_attributes():
    identity = assign_fields(IdentityInfo(), {"model": "MacBook Pro", "colour": "grey"})

    assert identity.model == "MacBook Pro"
    assert not hasattr(identity, "colour")


def test_run_extraction_assigns_values(fake_executor):
    fake_executor.add(["sysctl", "-n", "hw.model"], stdout="MacBookPro18,3\n")
    spec = CommandSpec(("sysctl", "-n", "hw.model"), (FieldRule("model_id", r"^\s*(\S+)"),))
    identity = IdentityInfo()

    values = run_extraction(spec, identity)

    assert values == {"model_id": "MacBookPro18,3"}
    assert identity.model_id == "MacBookPro18,3"


def test_run_extraction_of_failed_command_is_empty(fake_executor):
    spec = CommandSpec(("ioreg", "-l"), (FieldRule("uuid", r'"IOPlatformUUID" = "([^"]+)"'),))

    assert run_extraction(spec) == {}


def test_run_extractions_keeps_earlier_values(fake_executor):
    fake_executor.add(["first"], stdout="Model: A\n")
    fake_executor.add(["second"], stdout="Model: B\nSerial: S1\n")
    rules = (FieldRule("model", r"^Model:\s*(.+)$"), FieldRule("serial_number", r"^Serial:\s*(.+)$"))

    values = run_extractions([CommandSpec(("first",), rules), CommandSpec(("second",), rules)])

    assert values == {"model": "A", "serial_number": "S1"}


def test_find_all_returns_group_tuples():
    assert find_all(r"^nameserver (\S+)", "nameserver 1.1.1.1\nnameserver 8.8.8.8\n") == [("1.1.1.1",), ("8.8.8.8",)]
    assert find_all(r"(x)", "") == []



def test_first_available_skips_failing_and_empty_providers():
    def broken():
        raise RuntimeError("sensor unavailable")

    def empty():
        return []

    def sensor():
        return [42]

    assert first_available([broken, empty, sensor], default=[0]) == [42]
    assert first_available([broken, empty], default=[0]) == [0]


def test_first_available_with_source_names_the_provider():
    def acpi():
        return "40C"

    value, source = first_available_with_source([lambda: "", acpi])

    assert value == "40C"
    assert source == "acpi"

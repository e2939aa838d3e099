# Copyright (C) 2025 Intel Corporation
# SPDX-License-Identifier: Apache-2.0

"""
Declarative field extraction from command output.

Collectors describe what they scrape as data: a command with its argument
list and a table of (field, regex, converter) rules. A single routine runs
the command, applies every pattern and assigns the matched values. A rule
whose pattern does not match is skipped silently, leaving the field at its
zero value.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from .process import run_command

logger = logging.getLogger(__name__)


def to_int(value: str) -> int:
    """Convert the leading integer of a string, ignoring separators."""
    match = re.search(r"-?\d[\d,]*", value)
    if not match:
        raise ValueError(f"No integer in {value!r}")
    return int(match.group(0).replace(",", ""))


def to_float(value: str) -> float:
    """Convert the leading decimal number of a string."""
    match = re.search(r"-?\d+(?:\.\d+)?", value)
    if not match:
        raise ValueError(f"No number in {value!r}")
    return float(match.group(0))


def to_str(value: str) -> str:
    """Strip surrounding whitespace and quotes."""
    return value.strip().strip('"').strip()


@dataclass(frozen=True)
class FieldRule:
    """
    A single extraction rule.

    Attributes:
        field: Attribute name assigned on the target object
        pattern: Regular expression whose first group holds the value
        convert: Converter applied to the matched text
        flags: Regex flags, multiline by default
    """

    field: str
    pattern: str
    convert: Callable[[str], Any] = to_str
    flags: int = re.MULTILINE

    def apply(self, text: str) -> Optional[Any]:
        match = re.search(self.pattern, text, self.flags)
        if not match:
            return None
        raw = match.group(1)
        try:
            return self.convert(raw)
        except (TypeError, ValueError):
            return None


@dataclass(frozen=True)
class CommandSpec:
    """
    A command and the rules applied to its output.

    Attributes:
        command: Executable and argument list
        rules: Extraction rules applied to stdout
        timeout: Optional execution timeout in seconds
    """

    command: Tuple[str, ...]
    rules: Tuple[FieldRule, ...]
    timeout: Optional[float] = None


def extract_fields(text: str, rules: Iterable[FieldRule]) -> Dict[str, Any]:
    """
    Apply extraction rules to a block of text.

    The first rule that matches for a given field wins, so a table can list
    alternative patterns for the same field in priority order.

    Args:
        text: Command output
        rules: Extraction rules

    Returns:
        Dict mapping field names to converted values for matching rules
    """
    values: Dict[str, Any] = {}
    if not text:
        return values
    for rule in rules:
        if rule.field in values:
            continue
        value = rule.apply(text)
        if value is not None:
            values[rule.field] = value
    return values


def assign_fields(target: Any, values: Dict[str, Any]) -> Any:
    """
    Assign extracted values onto an object's attributes.

    Args:
        target: Object receiving the values (usually a report dataclass)
        values: Field name to value mapping

    Returns:
        The target object
    """
    for name, value in values.items():
        if not hasattr(target, name):
            logger.debug(f"Ignoring unknown field {name} for {type(target).__name__}")
            continue
        setattr(target, name, value)
    return target


def run_extraction(spec: CommandSpec, target: Any = None) -> Dict[str, Any]:
    """
    Run a command and extract fields from its output.

    A failed command yields an empty mapping; the process runner has
    already logged the failure.

    Args:
        spec: Command and extraction rules
        target: Optional object to assign the extracted values onto

    Returns:
        Dict of extracted values
    """
    result = run_command(list(spec.command), timeout=spec.timeout)
    if result.failed:
        return {}
    values = extract_fields(result.stdout, spec.rules)
    if target is not None:
        assign_fields(target, values)
    return values


def run_extractions(specs: Sequence[CommandSpec], target: Any = None) -> Dict[str, Any]:
    """
    Run several command specs and merge their extracted values.

    Values from earlier specs take precedence over later ones.

    Args:
        specs: Command specs, in priority order
        target: Optional object to assign the merged values onto

    Returns:
        Dict of merged extracted values
    """
    merged: Dict[str, Any] = {}
    for spec in specs:
        for name, value in run_extraction(spec).items():
            merged.setdefault(name, value)
    if target is not None:
        assign_fields(target, merged)
    return merged


def find_all(pattern: str, text: str, flags: int = re.MULTILINE) -> List[Tuple[str, ...]]:
    """
    Return every match of a pattern as a tuple of groups.

    Args:
        pattern: Regular expression
        text: Text to search
        flags: Regex flags

    Returns:
        List of group tuples (single-group patterns still produce tuples)
    """
    if not text:
        return []
    return [m.groups() for m in re.finditer(pattern, text, flags)]

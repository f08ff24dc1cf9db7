"""
Scenario Loader for the Banker's Safety Simulator.

Loads the allocation, maximum and available matrices from a data file.

Two formats are supported:
- Text: section headers "Allocation", "Maximum" and "Available", each
  followed by rows of whitespace-separated integers.
- JSON: {"allocation": [[...]], "maximum": [[...]], "available": [...]}
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List

from models.ledger import ProcessLedger
from models.resource import MalformedInputError

SECTIONS = ("allocation", "maximum", "available")


class ScenarioLoadError(Exception):
    """Exception raised when scenario file cannot be loaded or is invalid."""
    pass


@dataclass
class ScenarioData:
    """
    Raw matrices read from a data file.

    Attributes:
        allocation: [P][R] Resources held by each process
        maximum: [P][R] Maximum demand of each process
        available: [R] Initially available resources
        description: Optional free-text description
    """
    allocation: List[List[int]]
    maximum: List[List[int]]
    available: List[int]
    description: str = ""


def load_scenario(file_path: str, fmt: str = "auto") -> ScenarioData:
    """
    Load scenario matrices from a data file.

    Args:
        file_path: Path to the data file
        fmt: "text", "json", or "auto" (JSON if the file ends in .json)

    Returns:
        ScenarioData with the three matrices

    Raises:
        ScenarioLoadError: If file cannot be read or is invalid
    """
    path = Path(file_path)
    if fmt == "auto":
        fmt = "json" if path.suffix.lower() == ".json" else "text"

    try:
        with open(path, 'r', encoding='utf-8') as f:
            content = f.read()
    except FileNotFoundError:
        raise ScenarioLoadError(f"The data file could not be opened: {file_path}")
    except OSError as e:
        raise ScenarioLoadError(f"Cannot read data file {file_path}: {e}")

    if fmt == "json":
        return _parse_json(content)
    elif fmt == "text":
        return _parse_text(content)
    else:
        raise ScenarioLoadError(f"Unknown data format '{fmt}'")


def build_ledger(data: ScenarioData) -> ProcessLedger:
    """
    Build a process ledger from loaded matrices.

    Raises:
        ScenarioLoadError: If the matrices are malformed
    """
    try:
        return ProcessLedger.from_matrices(data.allocation, data.maximum, data.available)
    except MalformedInputError as e:
        raise ScenarioLoadError(f"Malformed input: {e}") from e


def load_ledger(file_path: str, fmt: str = "auto") -> ProcessLedger:
    """Load a data file and build its process ledger."""
    return build_ledger(load_scenario(file_path, fmt))


def _parse_text(content: str) -> ScenarioData:
    """
    Parse the sectioned text format.

    Sections must appear in the order Allocation, Maximum, Available.
    Blank lines and lines starting with '#' are ignored; headers are
    case-insensitive.
    """
    sections: Dict[str, List[List[int]]] = {}
    current = None

    for line_no, raw in enumerate(content.splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith('#'):
            continue

        header = line.lower()
        if header in SECTIONS:
            if header in sections:
                raise ScenarioLoadError(f"Line {line_no}: duplicate '{line}' section")
            expected = SECTIONS[len(sections)]
            if header != expected:
                raise ScenarioLoadError(
                    f"Line {line_no}: found '{line}' section, expected "
                    f"'{expected.capitalize()}' (order is Allocation, Maximum, Available)"
                )
            current = header
            sections[current] = []
            continue

        if current is None:
            raise ScenarioLoadError(
                f"Line {line_no}: data before the first section header "
                f"(expected 'Allocation')"
            )

        sections[current].append(_parse_row(line, line_no))

    for name in SECTIONS:
        if name not in sections:
            raise ScenarioLoadError(f"Data file missing '{name.capitalize()}' section")

    available_rows = sections["available"]
    if len(available_rows) != 1:
        raise ScenarioLoadError(
            f"'Available' section must have exactly one row, found {len(available_rows)}"
        )

    return ScenarioData(
        allocation=sections["allocation"],
        maximum=sections["maximum"],
        available=available_rows[0]
    )


def _parse_row(line: str, line_no: int) -> List[int]:
    try:
        return [int(token) for token in line.split()]
    except ValueError:
        raise ScenarioLoadError(f"Line {line_no}: expected integers, got '{line}'")


def _parse_json(content: str) -> ScenarioData:
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ScenarioLoadError(f"Invalid JSON in data file: {e}")

    if not isinstance(data, dict):
        raise ScenarioLoadError("JSON data file must contain an object")

    for name in SECTIONS:
        if name not in data:
            raise ScenarioLoadError(f"Data file missing '{name}' field")

    allocation = data['allocation']
    maximum = data['maximum']
    available = data['available']

    for name, matrix in (('allocation', allocation), ('maximum', maximum)):
        if not isinstance(matrix, list) or not all(isinstance(row, list) for row in matrix):
            raise ScenarioLoadError(f"'{name}' must be a list of rows")
    if not isinstance(available, list):
        raise ScenarioLoadError("'available' must be a single row")

    for name, rows in (('allocation', allocation), ('maximum', maximum), ('available', [available])):
        for row in rows:
            if not all(isinstance(x, int) and not isinstance(x, bool) for x in row):
                raise ScenarioLoadError(f"'{name}' must contain only integers, got {row}")

    return ScenarioData(
        allocation=allocation,
        maximum=maximum,
        available=available,
        description=data.get('description', '')
    )


def get_scenario_description(file_path: str) -> str:
    """
    Get description from a JSON data file without full loading.

    Returns:
        Description string, or empty string if not present or unreadable
    """
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError):
        return ''
    if not isinstance(data, dict):
        return ''
    return data.get('description', '')

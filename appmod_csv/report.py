"""Assessment report loading and validation.

Usage:
    document = load_document("report.json")       # raises ReportError subclasses
    targets  = read_target_ids(document)          # ["AppService.Linux", ...]
    target   = resolve_target(targets, "AppService.Linux")
    report   = parse_report(document)             # -> models.Report
"""

import json
from pathlib import Path
from typing import Any

from appmod_csv.models import FieldTypeError, Project, Report, Rule

# Checked in this order; the first missing key is reported.
_REQUIRED_KEYS = (
    ("metadata",),
    ("metadata", "targetIds"),
    ("projects",),
    ("rules",),
)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class ReportError(Exception):
    """Base exception for all report errors."""


class InvalidReportError(ReportError):
    """Raised when the report is not valid JSON or lacks required structure."""


class InvalidTargetError(ReportError):
    """Raised when the requested target is not listed in the report."""

    def __init__(self, target: str, valid_targets: list[str]) -> None:
        self.target = target
        self.valid_targets = list(valid_targets)
        super().__init__(
            f"Target '{target}' is not valid.\n"
            f"Valid targets are: {', '.join(self.valid_targets)}"
        )


class ReportReadError(ReportError):
    """Raised when the report file cannot be read."""


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------

def load_document(path: str | Path) -> dict[str, Any]:
    """Parse a report file and check that its required keys are present.

    Only presence is checked here. Types are checked when the values are
    read (see read_target_ids and parse_report).

    Raises:
        InvalidReportError: malformed JSON or a missing required key
        ReportReadError:    the file could not be read
    """
    path = Path(path)
    try:
        with path.open("rb") as f:
            document = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise InvalidReportError(f"Invalid JSON in input file. {exc}") from exc
    except OSError as exc:
        raise ReportReadError(f"Could not read input file. {exc}") from exc

    _validate(document)
    return document


def _validate(document: Any) -> None:
    """Raise InvalidReportError naming the first missing required key."""
    for key_path in _REQUIRED_KEYS:
        node = document
        for key in key_path:
            if not isinstance(node, dict) or key not in node:
                raise InvalidReportError(
                    f"Missing required property '{key}' in JSON."
                )
            node = node[key]


# ---------------------------------------------------------------------------
# Targets
# ---------------------------------------------------------------------------

def read_target_ids(document: dict[str, Any]) -> list[str]:
    """Return ``metadata.targetIds`` in source order."""
    target_ids = document["metadata"]["targetIds"]
    if not isinstance(target_ids, list) or not all(isinstance(t, str) for t in target_ids):
        raise InvalidReportError("'metadata.targetIds' must be an array of strings.")
    return list(target_ids)


def resolve_target(target_ids: list[str], target: str) -> str:
    """Return *target* if the report lists it, else raise InvalidTargetError."""
    if target not in target_ids:
        raise InvalidTargetError(target, target_ids)
    return target


# ---------------------------------------------------------------------------
# Rules and full report
# ---------------------------------------------------------------------------

def build_rule_index(rules: Any) -> dict[str, Rule]:
    """Map rule id to Rule. Missing leaf fields default to empty / zero."""
    if not isinstance(rules, dict):
        raise InvalidReportError("'rules' must be an object.")
    try:
        return {rule_id: Rule.from_dict(raw) for rule_id, raw in rules.items()}
    except FieldTypeError as exc:
        raise InvalidReportError(f"Invalid rule: {exc}") from exc


def parse_report(document: dict[str, Any]) -> Report:
    """Deserialize a validated document into a Report."""
    projects = document["projects"]
    if not isinstance(projects, list):
        raise InvalidReportError("'projects' must be an array.")
    try:
        parsed = [Project.from_dict(p) for p in projects]
    except FieldTypeError as exc:
        raise InvalidReportError(f"Invalid project data: {exc}") from exc

    return Report(
        target_ids=read_target_ids(document),
        projects=parsed,
        rules=build_rule_index(document["rules"]),
    )

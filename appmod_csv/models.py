"""Data models for assessment reports and the CSV rows projected from them.

Contains dataclasses built from the raw JSON document:
    - Rule
    - TargetOverride
    - Incident
    - Project
    - Report
    - CsvRow          (one output record)

JSON ``null`` is treated the same as an absent key. A present value of the
wrong JSON type raises FieldTypeError.
"""

from dataclasses import astuple, dataclass, field
from typing import Any


class FieldTypeError(ValueError):
    """Raised when a report field holds a value of the wrong JSON type."""


# ---------------------------------------------------------------------------
# Field readers
# ---------------------------------------------------------------------------

def _str(raw: dict[str, Any], key: str, default: str | None = "") -> str | None:
    value = raw.get(key)
    if value is None:
        return default
    if not isinstance(value, str):
        raise FieldTypeError(f"'{key}' must be a string, got {type(value).__name__}")
    return value


def _int(raw: dict[str, Any], key: str, default: int | None = None) -> int | None:
    value = raw.get(key)
    if value is None:
        return default
    # bool is an int subclass in Python, JSON true/false is not a number
    if isinstance(value, bool) or not isinstance(value, int):
        raise FieldTypeError(f"'{key}' must be an integer, got {type(value).__name__}")
    return value


def _object(raw: dict[str, Any], key: str) -> dict[str, Any]:
    value = raw.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise FieldTypeError(f"'{key}' must be an object, got {type(value).__name__}")
    return value


def _array(raw: dict[str, Any], key: str) -> list[Any]:
    value = raw.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise FieldTypeError(f"'{key}' must be an array, got {type(value).__name__}")
    return value


def _require_object(value: Any, what: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise FieldTypeError(f"{what} must be an object, got {type(value).__name__}")
    return value


# ---------------------------------------------------------------------------
# Report entities
# ---------------------------------------------------------------------------

@dataclass
class Rule:
    title: str = ""
    severity: str = ""
    description: str = ""
    effort: int = 0

    @classmethod
    def from_dict(cls, raw: Any) -> "Rule":
        raw = _require_object(raw, "rule")
        return cls(
            title=_str(raw, "title"),
            severity=_str(raw, "severity"),
            description=_str(raw, "description"),
            effort=_int(raw, "effort", default=0),
        )


@dataclass
class TargetOverride:
    """Severity and effort of an incident for one deployment target."""

    severity: str | None = None
    effort: int | None = None

    @classmethod
    def from_dict(cls, raw: Any) -> "TargetOverride":
        raw = _require_object(raw, "target entry")
        return cls(
            severity=_str(raw, "severity", default=None),
            effort=_int(raw, "effort"),
        )


@dataclass
class Incident:
    rule_id: str = ""
    incident_id: str = ""
    location: str = ""
    location_kind: str = ""
    line: int | None = None
    column: int | None = None
    snippet: str | None = None
    labels: list[str] = field(default_factory=list)
    targets: dict[str, TargetOverride] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: Any) -> "Incident":
        raw = _require_object(raw, "incident")
        labels = ["" if label is None else label for label in _array(raw, "labels")]
        for label in labels:
            if not isinstance(label, str):
                raise FieldTypeError(
                    f"'labels' entries must be strings, got {type(label).__name__}"
                )
        return cls(
            rule_id=_str(raw, "ruleId"),
            incident_id=_str(raw, "incidentId"),
            location=_str(raw, "location"),
            location_kind=_str(raw, "locationKind"),
            line=_int(raw, "line"),
            column=_int(raw, "column"),
            snippet=_str(raw, "snippet", default=None),
            labels=labels,
            targets={
                name: TargetOverride.from_dict(value)
                for name, value in _object(raw, "targets").items()
            },
        )


@dataclass
class Project:
    path: str = ""
    incidents: list[Incident] = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw: Any) -> "Project":
        raw = _require_object(raw, "project")
        return cls(
            path=_str(raw, "path"),
            incidents=[Incident.from_dict(i) for i in _array(raw, "incidents")],
        )


@dataclass
class Report:
    target_ids: list[str] = field(default_factory=list)
    projects: list[Project] = field(default_factory=list)
    rules: dict[str, Rule] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Output row
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CsvRow:
    """One projected CSV record. Field order matches the CSV header."""

    project: str
    rule_id: str
    rule_title: str
    incident_id: str
    location: str
    location_kind: str
    line: str
    column: str
    snippet: str
    severity: str
    effort: str
    labels: str

    def fields(self) -> tuple[str, ...]:
        return astuple(self)

"""Incident projection.

Functions:
    project_rows(report, target)   -> Iterator[CsvRow]
    summarize_rows(rows, rules)    -> dict
"""

from collections.abc import Iterable, Iterator

from appmod_csv.models import CsvRow, Incident, Report, Rule

LABEL_SEPARATOR = ";"


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def project_rows(report: Report, target: str) -> Iterator[CsvRow]:
    """Yield one row per incident that declares *target*, in report order."""
    for project in report.projects:
        for incident in project.incidents:
            if target not in incident.targets:
                continue
            yield _build_row(project.path, incident, target, report.rules)


def summarize_rows(rows: Iterable[CsvRow], rules: dict[str, Rule]) -> dict:
    by_severity: dict[str, int] = {}
    unknown_rules = 0
    total = 0

    for row in rows:
        total += 1
        by_severity[row.severity] = by_severity.get(row.severity, 0) + 1
        if row.rule_id not in rules:
            unknown_rules += 1

    return {
        "total":         total,
        "by_severity":   by_severity,
        "unknown_rules": unknown_rules,
    }


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _text(value: int | str | None) -> str:
    """Render an optional value; absent is empty, zero stays "0"."""
    return "" if value is None else str(value)


def _build_row(
    project_path: str,
    incident: Incident,
    target: str,
    rules: dict[str, Rule],
) -> CsvRow:
    override = incident.targets[target]
    rule = rules.get(incident.rule_id)
    return CsvRow(
        project=project_path,
        rule_id=incident.rule_id,
        rule_title=rule.title if rule else "",
        incident_id=incident.incident_id,
        location=incident.location,
        location_kind=incident.location_kind,
        line=_text(incident.line),
        column=_text(incident.column),
        snippet=_text(incident.snippet),
        # Rule-level severity/effort are never a fallback here
        severity=_text(override.severity),
        effort=_text(override.effort),
        labels=LABEL_SEPARATOR.join(incident.labels),
    )

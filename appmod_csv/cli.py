"""CLI entry point: converts an assessment report to CSV using Click.

Examples:
    appmod-csv -i report.json --list-targets
    appmod-csv -i report.json -t AppService.Linux -o incidents.csv --excel
    appmod-csv --init-config appmod-config.yaml

Exit codes:
    0  success
    1  invalid or missing arguments (or configuration error)
    2  input file does not exist
    3  input is not valid JSON or lacks required structure
    4  target is not listed in the report
    5  I/O error reading input or writing output
"""

import functools
import sys
from pathlib import Path

import click

from appmod_csv import __version__

EXIT_SUCCESS = 0
EXIT_INVALID_ARGUMENTS = 1
EXIT_FILE_NOT_FOUND = 2
EXIT_INVALID_JSON = 3
EXIT_INVALID_TARGET = 4
EXIT_IO_ERROR = 5


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _fail(message: str, code: int) -> None:
    click.echo(message, err=True)
    sys.exit(code)


def _handle_report_errors(func):
    """Decorator that maps report, config and output errors to exit codes."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        from appmod_csv.config import ConfigError
        from appmod_csv.report import (
            InvalidReportError,
            InvalidTargetError,
            ReportReadError,
        )
        from appmod_csv.reports.csv_export import OutputWriteError

        try:
            return func(*args, **kwargs)
        except ConfigError as exc:
            _fail(f"Configuration error: {exc}", EXIT_INVALID_ARGUMENTS)
        except InvalidReportError as exc:
            _fail(f"Error: {exc}", EXIT_INVALID_JSON)
        except InvalidTargetError as exc:
            _fail(
                f"Error: {exc}\nUse --list-targets to see all valid options.",
                EXIT_INVALID_TARGET,
            )
        except ReportReadError as exc:
            _fail(f"Error: {exc}", EXIT_IO_ERROR)
        except OutputWriteError as exc:
            _fail(f"Error: {exc}", EXIT_IO_ERROR)

    return wrapper


def _load_config(config_path: str | None):
    from appmod_csv.config import DEFAULT_CONFIG_PATH, load

    if config_path is None:
        return load(DEFAULT_CONFIG_PATH)
    return load(config_path, required=True)


# ---------------------------------------------------------------------------
# Command
# ---------------------------------------------------------------------------

@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("-i", "--input", "input_path", default=None,
              help="Path to the assessment report JSON file.")
@click.option("-t", "--target", default=None,
              help="Target platform to filter incidents for (e.g. AppService.Linux).")
@click.option("-o", "--output", "output_path", default=None,
              help="Path to the output CSV file. Writes to stdout if omitted.")
@click.option("-l", "--list-targets", is_flag=True, default=False,
              help="List all valid targets from the input report and exit.")
@click.option("-e", "--excel", is_flag=True, default=False,
              help="Add a UTF-8 byte-order mark for Excel compatibility.")
@click.option("-c", "--config", "config_path", default=None,
              help="YAML file with default options [default: appmod-config.yaml if present].")
@click.option("--init-config", "init_config_path", default=None,
              help="Write a template config file to this path and exit.")
@click.option("-v", "--verbose", is_flag=True, default=False,
              help="Print progress details to stderr.")
@click.version_option(__version__, prog_name="appmod-csv")
@_handle_report_errors
def cli(input_path: str | None, target: str | None, output_path: str | None,
        list_targets: bool, excel: bool, config_path: str | None,
        init_config_path: str | None, verbose: bool) -> None:
    """Convert an application modernization assessment report to CSV."""
    from appmod_csv.config import generate_template
    from appmod_csv.report import (
        load_document,
        parse_report,
        read_target_ids,
        resolve_target,
    )
    from appmod_csv.reports.csv_export import export_csv
    from appmod_csv.reports.incidents import project_rows, summarize_rows

    def log(message: str) -> None:
        if verbose:
            click.echo(f"[verbose] {message}", err=True)

    if init_config_path:
        generate_template(init_config_path)
        click.echo(f"Template written to '{init_config_path}'.")
        return

    config = _load_config(config_path)
    if target is None:
        target = config.target
    excel = excel or config.excel

    if input_path is None:
        _fail("Error: --input is required.", EXIT_INVALID_ARGUMENTS)

    input_file = Path(input_path).resolve()
    if not input_file.is_file():
        _fail(f"Error: Input file '{input_file}' does not exist.", EXIT_FILE_NOT_FOUND)

    log(f"Reading report {input_file}")
    document = load_document(input_file)
    target_ids = read_target_ids(document)
    log(f"Report lists {len(target_ids)} target(s)")

    if list_targets:
        click.echo("Valid targets in this report:")
        for valid_target in target_ids:
            click.echo(f"  {valid_target}")
        return

    if not target:
        _fail(
            "Error: --target is required. Use --list-targets to see valid options.",
            EXIT_INVALID_ARGUMENTS,
        )

    resolve_target(target_ids, target)
    report = parse_report(document)
    log(f"Indexed {len(report.rules)} rule(s) across {len(report.projects)} project(s)")

    rows = list(project_rows(report, target))
    count = export_csv(rows, output_path, excel=excel)

    summary = summarize_rows(rows, report.rules)
    log(f"Wrote {summary['total']} row(s) for target '{target}'")
    for severity, n in summary["by_severity"].items():
        log(f"  {severity or '(none)'}: {n}")
    if summary["unknown_rules"]:
        log(f"{summary['unknown_rules']} incident(s) reference rules missing from the report")

    if output_path is not None:
        click.echo(f"CSV written to: {Path(output_path).resolve()}")
        click.echo(f"Total incidents for target '{target}': {count}")


# ---------------------------------------------------------------------------
# Console script
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> None:
    """Run the command, reporting usage errors with the invalid-arguments code."""
    try:
        code = cli.main(args=argv, prog_name="appmod-csv", standalone_mode=False)
    except click.UsageError as exc:
        exc.show()
        sys.exit(EXIT_INVALID_ARGUMENTS)
    except click.ClickException as exc:
        exc.show()
        sys.exit(exc.exit_code)
    except click.Abort:
        click.echo("Aborted!", err=True)
        sys.exit(EXIT_INVALID_ARGUMENTS)
    sys.exit(code if isinstance(code, int) else EXIT_SUCCESS)

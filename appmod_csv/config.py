"""Optional defaults loaded from a YAML file and the environment.

Usage:
    config = load("appmod-config.yaml")                 # raises ConfigError on bad config
    config = load("appmod-config.yaml", required=True)  # file must exist
    generate_template("appmod-config.yaml")             # writes example file to disk

Precedence (highest first): command-line option, environment variable
(APPMOD_TARGET, APPMOD_EXCEL), config file, built-in default.
"""

import os
from dataclasses import dataclass
from pathlib import Path

import yaml

DEFAULT_CONFIG_PATH = "appmod-config.yaml"

_TRUE_VALUES  = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class ConfigError(Exception):
    """Raised when the configuration is missing or invalid."""


# ---------------------------------------------------------------------------
# Config dataclass
# ---------------------------------------------------------------------------

@dataclass
class Config:
    target: str | None = None
    excel: bool = False


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------

def load(config_path: str = DEFAULT_CONFIG_PATH, required: bool = False) -> Config:
    """Load defaults from *config_path*, then apply environment overrides.

    A missing file yields an empty Config unless *required* is set.

    Raises:
        ConfigError: if a required file is missing, the file is malformed,
                     or a value has the wrong type.
    """
    path = Path(config_path)
    defaults: dict = {}

    if path.exists():
        defaults = _read_defaults(path)
    elif required:
        raise ConfigError(f"Config file not found: '{config_path}'")

    target = os.environ.get("APPMOD_TARGET") or defaults.get("target")
    excel_env = os.environ.get("APPMOD_EXCEL")
    excel = _parse_bool(excel_env, "APPMOD_EXCEL") if excel_env else defaults.get("excel", False)

    config = Config(target=target, excel=excel)
    _validate(config, str(config_path))
    return config


def _read_defaults(path: Path) -> dict:
    try:
        with path.open(encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse '{path}': {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Could not read '{path}': {exc}") from exc

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"'{path}' must be a YAML mapping at the top level.")

    defaults = raw.get("defaults") or {}
    if not isinstance(defaults, dict):
        raise ConfigError(f"'defaults' in '{path}' must be a mapping.")
    return defaults


def _parse_bool(value: str, name: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigError(f"{name} must be one of {', '.join(_TRUE_VALUES + _FALSE_VALUES)}, got '{value}'")


def _validate(config: Config, source: str) -> None:
    """Raise ConfigError if a value has the wrong type."""
    errors: list[str] = []

    if config.target is not None and (not isinstance(config.target, str) or not config.target.strip()):
        errors.append("  - 'defaults.target' must be a non-empty string")
    if not isinstance(config.excel, bool):
        errors.append("  - 'defaults.excel' must be true or false")

    if errors:
        raise ConfigError(f"Invalid configuration in '{source}':\n" + "\n".join(errors))


# ---------------------------------------------------------------------------
# Template generator (used by --init-config)
# ---------------------------------------------------------------------------

TEMPLATE = """\
defaults:
  # Target used when --target is not given (see --list-targets)
  target: "AppService.Linux"
  # Prefix the CSV with a UTF-8 byte-order mark for Excel
  excel: false
"""


def generate_template(output_path: str = DEFAULT_CONFIG_PATH) -> None:
    """Write a template appmod-config.yaml to *output_path*.

    Raises:
        ConfigError: if the file already exists.
    """
    path = Path(output_path)
    if path.exists():
        raise ConfigError(
            f"'{output_path}' already exists. Remove it first or choose a different path."
        )
    try:
        path.write_text(TEMPLATE, encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Could not write '{output_path}': {exc}") from exc

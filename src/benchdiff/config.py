"""Configuration loading and resolution.

Settings come from three places, highest precedence first:

1. command-line arguments
2. the mode section (``interactive:`` or ``ci:``) of the config file
3. the top-level keys of the config file

Anything still unset falls back to the per-mode defaults below.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from benchdiff.domain.comparison import DEFAULT_SIGNIFICANCE_THRESHOLD
from benchdiff.domain.errors import ConfigurationError

logger = logging.getLogger("benchdiff.config")

# Searched in order below the base path; the first existing file wins.
CONFIG_CANDIDATES = (".config/benchdiff.yaml", "benchdiff.yaml", ".benchdiff.yaml")

OUTPUT_STYLES = ("console", "json", "markdown")

LOG_FILE = "benchdiff.log"


class Mode(Enum):
    """How the two versions to compare are obtained."""

    INTERACTIVE = "interactive"
    CI = "ci"


@dataclass(frozen=True)
class ConfigValues:
    """One layer of settings; ``None`` means "not set at this layer"."""

    verbose: bool | None = None
    output_directory: str | None = None
    output_style: tuple[str, ...] | None = None
    benchmarks: tuple[str, ...] | None = None
    no_delete: bool | None = None
    significance_threshold: float | None = None
    parallel: bool | None = None
    timeout: float | None = None


@dataclass(frozen=True)
class ConfigFile:
    """Parsed contents of a config file."""

    path: Path | None = None
    global_values: ConfigValues = field(default_factory=ConfigValues)
    interactive: ConfigValues = field(default_factory=ConfigValues)
    ci: ConfigValues = field(default_factory=ConfigValues)

    def section(self, mode: Mode) -> ConfigValues:
        return self.interactive if mode is Mode.INTERACTIVE else self.ci


@dataclass(frozen=True)
class ResolvedConfig:
    """Fully resolved settings for one invocation."""

    verbose: bool
    output_directory: Path
    output_style: tuple[str, ...]
    benchmarks: tuple[str, ...]
    no_delete: bool
    significance_threshold: float
    parallel: bool
    timeout: float | None


_DEFAULTS: dict[Mode, ConfigValues] = {
    Mode.INTERACTIVE: ConfigValues(
        verbose=False,
        no_delete=False,
        output_style=("console",),
        significance_threshold=DEFAULT_SIGNIFICANCE_THRESHOLD,
        parallel=False,
    ),
    Mode.CI: ConfigValues(
        verbose=False,
        no_delete=True,
        output_style=("json", "markdown"),
        significance_threshold=DEFAULT_SIGNIFICANCE_THRESHOLD,
        parallel=False,
    ),
}


def defaults_for(mode: Mode) -> ConfigValues:
    """Return the built-in defaults of *mode*."""
    return _DEFAULTS[mode]


# ---------------------------------------------------------------------------
# Value parsing
# ---------------------------------------------------------------------------


def parse_output_styles(value: Any, *, source: str = "output_style") -> tuple[str, ...]:
    """Normalize a list or comma-separated string of output styles."""
    raw: list[Any]
    if isinstance(value, str):
        raw = [value]
    elif isinstance(value, (list, tuple)):
        raw = list(value)
    else:
        msg = f"{source} must be a list of strings"
        raise ConfigurationError(msg)

    styles: list[str] = []
    for item in raw:
        if not isinstance(item, str):
            msg = f"{source} must be a list of strings"
            raise ConfigurationError(msg)
        for part in item.split(","):
            style = part.strip().lower()
            if not style:
                continue
            if style not in OUTPUT_STYLES:
                msg = (
                    f"Invalid output style: '{style}'. "
                    f"Valid options are: {', '.join(OUTPUT_STYLES)}"
                )
                raise ConfigurationError(msg)
            if style not in styles:
                styles.append(style)
    return tuple(styles)


def validate_threshold(value: Any, *, source: str = "significance_threshold") -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        msg = f"{source} must be a number"
        raise ConfigurationError(msg)
    threshold = float(value)
    if not math.isfinite(threshold) or threshold < 0:
        msg = f"{source} must be a non-negative number, got {value}"
        raise ConfigurationError(msg)
    return threshold


def validate_timeout(value: Any, *, source: str = "timeout") -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        msg = f"{source} must be a positive number of seconds"
        raise ConfigurationError(msg)
    return float(value)


def _bool(data: dict[str, Any], key: str, where: str) -> bool | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, bool):
        msg = f"{where}{key} must be true or false"
        raise ConfigurationError(msg)
    return value


def _string_list(data: dict[str, Any], key: str, where: str) -> tuple[str, ...] | None:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        msg = f"{where}{key} must be a list of strings"
        raise ConfigurationError(msg)
    return tuple(value)


def _values_from_dict(data: dict[str, Any], where: str) -> ConfigValues:
    output_directory = data.get("output_directory")
    if output_directory is not None and not isinstance(output_directory, str):
        msg = f"{where}output_directory must be a string"
        raise ConfigurationError(msg)

    output_style = data.get("output_style")
    threshold = data.get("significance_threshold")
    timeout = data.get("timeout")
    return ConfigValues(
        verbose=_bool(data, "verbose", where),
        output_directory=output_directory,
        output_style=(
            parse_output_styles(output_style, source=f"{where}output_style")
            if output_style is not None
            else None
        ),
        benchmarks=_string_list(data, "benchmarks", where),
        no_delete=_bool(data, "no_delete", where),
        significance_threshold=(
            validate_threshold(threshold, source=f"{where}significance_threshold")
            if threshold is not None
            else None
        ),
        parallel=_bool(data, "parallel", where),
        timeout=validate_timeout(timeout, source=f"{where}timeout") if timeout is not None else None,
    )


def parse_config(data: Any, path: Path | None = None) -> ConfigFile:
    """Build a ConfigFile from a parsed YAML document."""
    if data is None:
        return ConfigFile(path=path)
    if not isinstance(data, dict):
        msg = f"Configuration file '{path}' must contain a mapping"
        raise ConfigurationError(msg)

    sections: dict[str, ConfigValues] = {}
    for mode in Mode:
        raw = data.get(mode.value)
        if raw is None:
            sections[mode.value] = ConfigValues()
        elif isinstance(raw, dict):
            sections[mode.value] = _values_from_dict(raw, f"{mode.value}.")
        else:
            msg = f"Section '{mode.value}' in '{path}' must be a mapping"
            raise ConfigurationError(msg)

    return ConfigFile(
        path=path,
        global_values=_values_from_dict(data, ""),
        interactive=sections[Mode.INTERACTIVE.value],
        ci=sections[Mode.CI.value],
    )


# ---------------------------------------------------------------------------
# File lookup
# ---------------------------------------------------------------------------


def find_config_file(base_path: Path) -> Path | None:
    """Return the first existing config file below *base_path*, if any."""
    for candidate in CONFIG_CANDIDATES:
        path = base_path / candidate
        logger.debug("Checking for configuration file at %s", path)
        if path.is_file():
            return path
    return None


def load_config_file(base_path: Path) -> ConfigFile:
    """Find and parse the config file below *base_path*.

    Returns an empty ConfigFile when none exists.
    """
    path = find_config_file(base_path)
    if path is None:
        logger.info("No configuration file found in %s, using defaults", base_path)
        return ConfigFile()

    logger.info("Using configuration file %s", path)
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        msg = f"Failed to parse configuration file '{path}': {exc}"
        raise ConfigurationError(msg) from exc
    return parse_config(data, path)


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


def _first(*values: Any) -> Any:
    for value in values:
        if value is not None:
            return value
    return None


def _first_non_empty(*values: tuple[str, ...] | None) -> tuple[str, ...]:
    for value in values:
        if value:
            return value
    return ()


def resolve_config(
    file_config: ConfigFile,
    args: ConfigValues,
    mode: Mode,
    default_output_directory: Path,
) -> ResolvedConfig:
    """Merge argument, mode, global and default layers into a ResolvedConfig.

    Raises:
        ConfigurationError: if no benchmark project was requested anywhere.
    """
    section = file_config.section(mode)
    global_values = file_config.global_values
    defaults = defaults_for(mode)
    layers = (args, section, global_values, defaults)

    benchmarks = _first_non_empty(*(layer.benchmarks for layer in layers))
    if not benchmarks:
        msg = (
            "At least one benchmark must be specified "
            "(via command line or configuration file)."
        )
        raise ConfigurationError(msg)

    output_directory = _first(*(layer.output_directory for layer in layers))
    return ResolvedConfig(
        verbose=bool(_first(*(layer.verbose for layer in layers))),
        output_directory=(
            Path(output_directory).expanduser().resolve()
            if output_directory is not None
            else default_output_directory
        ),
        output_style=_first_non_empty(*(layer.output_style for layer in layers)),
        benchmarks=benchmarks,
        no_delete=bool(_first(*(layer.no_delete for layer in layers))),
        significance_threshold=float(
            _first(*(layer.significance_threshold for layer in layers))
        ),
        parallel=bool(_first(*(layer.parallel for layer in layers))),
        timeout=_first(*(layer.timeout for layer in layers)),
    )


def load_configuration(
    base_path: Path,
    args: ConfigValues,
    mode: Mode,
    default_output_directory: Path,
) -> ResolvedConfig:
    """Load the config file below *base_path* and resolve it against *args*."""
    return resolve_config(load_config_file(base_path), args, mode, default_output_directory)

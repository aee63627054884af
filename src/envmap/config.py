"""Configuration loading and management for envmap.

This module holds every tunable constant of the map: rendering options,
report filters, and the insight thresholds. Configuration sources are merged
in priority order:
    1. Defaults (defined in the dataclasses below)
    2. Global config (~/.envmap.toml)
    3. Project config (./envmap.toml)
    4. Explicit config file
    5. Environment variables (ENVMAP_* prefix)
    6. CLI overrides (passed as kwargs)

Example:
    >>> config = load_config(min_score=50, task_mode="runs")
    >>> config.options.report_filter.min_score
    50
    >>> config.options.task_mode
    'runs'
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Literal, Optional

from .exceptions import ConfigurationError, InvalidConfigError

# Type aliases for clarity
OutputFormat = Literal["json", "mermaid", "both"]
TaskMode = Literal["none", "runs", "clustered"]
Verbosity = Literal["quiet", "normal", "verbose"]

OUTPUT_FORMATS = ("json", "mermaid", "both")
TASK_MODES = ("none", "runs", "clustered")
_TASK_MODE_ALIASES = {"per-run": "runs", "per_run": "runs"}


@dataclass(frozen=True)
class ThresholdConfig:
    """Insight and clustering thresholds.

    These are behavioral contracts, not tuning knobs picked per fleet.
    Dashboards compare insights across hosts, so override them only to
    experiment.

    Attributes:
        Top recurring issue:
            top_issue_high_count: Occurrences at which the top issue is high severity

        Blast radius:
            blast_radius_min_children: Minimum envs under a base before it is judged
            (a base is flagged when bad children >= ceil(children / 2))

        Ecosystem hygiene:
            hygiene_min_reports: Reports with a leak / injected path to flag the fleet

        High entropy:
            entropy_min_reports: Minimum reports before entropy is judged
            entropy_min_distinct_codes: Distinct non-info codes that count as chaos

        Flakiness:
            flaky_min_success_rate: Exclusive lower bound (below = systemic failure)
            flaky_max_success_rate: Exclusive upper bound (at or above = healthy)
            flaky_max_reported: Flaky clusters reported
            env_flaky_max_reported: Extra env-dependent flakes reported
            failing_env_hint_limit: Worst envs named per flaky insight

        Hotspots and contagion:
            hotspot_max_reported: Environments considered as hotspots
            hotspot_min_failures: Aggregate FAILED_RUN weight to flag a hotspot
            contagion_min_share: Share of failed runs one code must explain
    """

    top_issue_high_count: int = 3

    blast_radius_min_children: int = 3

    hygiene_min_reports: int = 2

    entropy_min_reports: int = 5
    entropy_min_distinct_codes: int = 8

    flaky_min_success_rate: float = 0.20
    flaky_max_success_rate: float = 0.95
    flaky_max_reported: int = 3
    env_flaky_max_reported: int = 2
    failing_env_hint_limit: int = 2

    hotspot_max_reported: int = 2
    hotspot_min_failures: int = 3

    contagion_min_share: float = 0.5

    def __post_init__(self) -> None:
        """Validate threshold configuration."""
        for name in ("flaky_min_success_rate", "flaky_max_success_rate", "contagion_min_share"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be between 0.0 and 1.0")

        if self.flaky_min_success_rate >= self.flaky_max_success_rate:
            raise ValueError("flaky_min_success_rate must be below flaky_max_success_rate")

        for f in fields(self):
            if f.type == "int" and getattr(self, f.name) < 0:
                raise ValueError(f"{f.name} must be non-negative")


# Default threshold configuration (singleton)
DEFAULT_THRESHOLDS = ThresholdConfig()


@dataclass(frozen=True)
class ReportFilter:
    """Which environment reports become nodes.

    Attributes:
        min_score: Drop reports scoring below this (missing score counts as 0)
        codes: Keep only reports carrying ANY of these finding codes
        paths_under: Keep only interpreter paths under this prefix
    """

    min_score: Optional[float] = None
    codes: tuple[str, ...] = ()
    paths_under: Optional[str] = None

    def __post_init__(self) -> None:
        # Accept lists from TOML / CLI
        object.__setattr__(self, "codes", tuple(self.codes))

    @property
    def is_empty(self) -> bool:
        return self.min_score is None and not self.codes and not self.paths_under


@dataclass(frozen=True)
class MapOptions:
    """Options for building and rendering one map.

    Attributes:
        output_format: json | mermaid | both (renderer only; the graph is always built)
        report_filter: Report selection
        task_mode: none | runs | clustered ("per-run" is accepted for runs)
        max_top_issues: Length cap of the summary's top-issues list
        include_base_subgraphs: Group envs under their base in the diagram
        include_hot_edge_labels: Label base->env edges with the dominant issue
        case_insensitive_paths: Fold path case before hashing/filtering
            (None = platform default)
    """

    output_format: OutputFormat = "both"
    report_filter: ReportFilter = field(default_factory=ReportFilter)
    task_mode: TaskMode = "clustered"
    max_top_issues: int = 10
    include_base_subgraphs: bool = True
    include_hot_edge_labels: bool = True
    case_insensitive_paths: Optional[bool] = None

    def __post_init__(self) -> None:
        mode = _TASK_MODE_ALIASES.get(self.task_mode, self.task_mode)
        object.__setattr__(self, "task_mode", mode)

        if self.output_format not in OUTPUT_FORMATS:
            raise ValueError(
                f"output_format must be one of {', '.join(OUTPUT_FORMATS)}, got {self.output_format!r}"
            )
        if self.task_mode not in TASK_MODES:
            raise ValueError(
                f"task_mode must be one of {', '.join(TASK_MODES)}, got {self.task_mode!r}"
            )
        if self.max_top_issues < 0:
            raise ValueError("max_top_issues must be non-negative")

    @property
    def wants_mermaid(self) -> bool:
        return self.output_format in ("mermaid", "both")


DEFAULT_OPTIONS = MapOptions()


@dataclass(frozen=True)
class MapConfig:
    """Configuration for one CLI invocation.

    Attributes:
        out_dir: Directory receiving venv-map.json, venv-map.mmd, insights.json
        run_log_max_lines: Tail length read from the run log
        include_tasks: Read the run log at all
        verbosity: Logging verbosity level
        options: Map building/rendering options
        thresholds: Insight thresholds
    """

    out_dir: str = ".envmap"
    run_log_max_lines: int = 5000
    include_tasks: bool = True
    verbosity: Verbosity = "normal"
    options: MapOptions = field(default_factory=MapOptions)
    thresholds: ThresholdConfig = field(default_factory=ThresholdConfig)

    def __post_init__(self) -> None:
        if self.run_log_max_lines < 1:
            raise ValueError("run_log_max_lines must be at least 1")
        if self.verbosity not in ("quiet", "normal", "verbose"):
            raise ValueError(f"verbosity must be quiet, normal or verbose, got {self.verbosity!r}")


# Flat keys accepted from TOML top level, env vars and CLI overrides, and the
# nested dataclass each one lands in.
_TOP_LEVEL_KEYS = {f.name for f in fields(MapConfig)} - {"options", "thresholds"}
_OPTION_KEYS = {f.name for f in fields(MapOptions)} - {"report_filter"}
_FILTER_KEYS = {f.name for f in fields(ReportFilter)}

_ENV_TYPES: dict[str, type] = {
    "out_dir": str,
    "run_log_max_lines": int,
    "include_tasks": bool,
    "verbosity": str,
    "output_format": str,
    "task_mode": str,
    "max_top_issues": int,
    "include_base_subgraphs": bool,
    "include_hot_edge_labels": bool,
    "case_insensitive_paths": bool,
    "min_score": float,
    "paths_under": str,
}


def load_config(config_file: Optional[Path] = None, **overrides: Any) -> MapConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags); flat keys
            such as ``min_score`` or ``task_mode`` are routed to the nested
            section they belong to. ``None`` values are ignored.

    Returns:
        Validated MapConfig instance

    Raises:
        ConfigurationError: If a config file is invalid or missing, or a
            value fails validation
    """
    merged: dict[str, Any] = {}

    global_config = Path.home() / ".envmap.toml"
    if global_config.exists():
        try:
            _merge_toml(merged, _load_toml_file(global_config))
        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError(f"Invalid global config '{global_config}': {e}")

    project_config = Path.cwd() / "envmap.toml"
    if project_config.exists():
        try:
            _merge_toml(merged, _load_toml_file(project_config))
        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError(f"Invalid project config '{project_config}': {e}")

    if config_file is not None:
        if not config_file.exists():
            raise ConfigurationError(f"Config file not found: {config_file}")
        try:
            _merge_toml(merged, _load_toml_file(config_file))
        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError(f"Invalid config file '{config_file}': {e}")

    merged.update(_load_env_vars())

    # Convert verbosity boolean flags to string
    if overrides.pop("verbose", False):
        overrides["verbosity"] = "verbose"
    if overrides.pop("quiet", False):
        overrides["verbosity"] = "quiet"

    merged.update({k: v for k, v in overrides.items() if v is not None})

    return _build_config(merged)


def _merge_toml(merged: dict[str, Any], data: dict[str, Any]) -> None:
    """Flatten [filter] and [options] tables; keep [thresholds] as a dict."""
    for key, value in data.items():
        if key in ("filter", "options") and isinstance(value, dict):
            merged.update(value)
        elif key == "thresholds" and isinstance(value, dict):
            merged.setdefault("thresholds", {}).update(value)
        else:
            merged[key] = value


def _build_config(merged: dict[str, Any]) -> MapConfig:
    thresholds_value = merged.pop("thresholds", None)
    top: dict[str, Any] = {}
    opts: dict[str, Any] = {}
    filt: dict[str, Any] = {}

    for key, value in merged.items():
        if key in _TOP_LEVEL_KEYS:
            top[key] = value
        elif key in _OPTION_KEYS:
            opts[key] = value
        elif key in _FILTER_KEYS:
            filt[key] = value
        else:
            raise ConfigurationError(f"Invalid configuration: unknown key '{key}'")

    try:
        if isinstance(thresholds_value, ThresholdConfig):
            thresholds = thresholds_value
        else:
            thresholds = ThresholdConfig(**(thresholds_value or {}))
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid [thresholds] config: {e}")

    try:
        options = replace(DEFAULT_OPTIONS, report_filter=ReportFilter(**filt), **opts)
        return MapConfig(options=options, thresholds=thresholds, **top)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid configuration: {e}")


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from ENVMAP_* environment variables.

    Supported environment variables:
        ENVMAP_OUT_DIR: str
        ENVMAP_RUN_LOG_MAX_LINES: int
        ENVMAP_INCLUDE_TASKS: bool (true/false/1/0)
        ENVMAP_VERBOSITY: quiet/normal/verbose
        ENVMAP_OUTPUT_FORMAT: json/mermaid/both
        ENVMAP_TASK_MODE: none/runs/clustered
        ENVMAP_MAX_TOP_ISSUES: int
        ENVMAP_INCLUDE_BASE_SUBGRAPHS: bool
        ENVMAP_INCLUDE_HOT_EDGE_LABELS: bool
        ENVMAP_CASE_INSENSITIVE_PATHS: bool
        ENVMAP_MIN_SCORE: float
        ENVMAP_PATHS_UNDER: str

    Returns:
        Dict of field_name -> parsed_value for any ENVMAP_* vars found.
    """
    result: dict[str, Any] = {}

    for field_name, expected in _ENV_TYPES.items():
        env_key = f"ENVMAP_{field_name.upper()}"
        env_value = os.environ.get(env_key)
        if env_value is None:
            continue
        try:
            result[field_name] = _parse_env_value(env_value, expected)
        except ValueError as e:
            raise InvalidConfigError(env_key, env_value, str(e))

    return result


def _parse_env_value(value: str, expected: type) -> Any:
    """Parse environment variable string to the expected type.

    Raises:
        ValueError: If value can't be parsed to expected type
    """
    if expected is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        elif lower in ("false", "0", "no", "off"):
            return False
        else:
            raise ValueError(f"expected true/false, got '{value}'")

    if expected is int:
        return int(value)

    if expected is float:
        return float(value)

    return value


def _load_toml_file(path: Path) -> dict:
    """Load TOML file and return parsed dict.

    Raises:
        ConfigurationError: If tomllib/tomli not available
        Exception: If TOML parsing fails
    """
    try:
        # Python 3.11+ has tomllib in stdlib
        import tomllib
    except ModuleNotFoundError:
        try:
            # Fallback to tomli for Python 3.9-3.10
            import tomli as tomllib  # type: ignore
        except ImportError:
            raise ConfigurationError(
                "TOML support requires Python 3.11+ or 'tomli' package. "
                "Install with: pip install tomli"
            )

    with open(path, "rb") as f:
        return tomllib.load(f)

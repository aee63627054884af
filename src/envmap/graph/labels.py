"""Human-readable labels and grouping keys derived from interpreter paths."""

import re
from typing import Optional

from ..models import EnvironmentReport

_SEPARATORS = re.compile(r"[\\/]+")
_SCRIPT_DIRS = ("bin", "scripts")


def _is_executable_name(segment: str) -> bool:
    lower = segment.lower()
    return lower.startswith("python") or lower.endswith(".exe")


def env_label(python_path: str) -> str:
    """Short hint for an environment: its last two meaningful path segments.

    Unlike a plain "last two segments" rule, the interpreter file name and a
    trailing ``bin``/``Scripts`` directory are dropped first.
    ``/home/u/proj/.venv/bin/python`` becomes ``proj/.venv`` rather than ``bin/python``.
    """
    parts = [p for p in _SEPARATORS.split(python_path) if p]
    if parts and _is_executable_name(parts[-1]):
        parts = parts[:-1]
    if parts and parts[-1].lower() in _SCRIPT_DIRS:
        parts = parts[:-1]
    if not parts:
        return python_path
    return "/".join(parts[-2:])


def base_key(report: EnvironmentReport) -> str:
    """Grouping key for the base install an environment derives from.

    Falls back from the declared base prefix, to the environment's own
    prefix, to the interpreter path itself.
    """
    facts = report.facts
    if facts is not None:
        if facts.base_prefix:
            return facts.base_prefix
        if facts.prefix:
            return facts.prefix
    return report.python_path


def base_label(key: str, version: Optional[str], arch: Optional[str]) -> str:
    head = " ".join(p for p in ("Base:", version or "py?", arch) if p)
    return f"{head} • {key}"

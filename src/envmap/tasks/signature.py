"""Task signatures: which run records are "the same task".

Two runs share a signature when task name, normalized command and normalized
requirements agree. Normalization makes cosmetic differences (extra spaces,
command case, requirement order) irrelevant.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from ..identity import sha256_hex
from ..models import RunRecord, TaskRequirements

_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class TaskSignature:
    sig_id: str  # "task_<16 hex>"
    name: str
    command: str  # normalized
    requirements_key: str  # normalized requirements fingerprint


def normalize_command(command: str) -> str:
    """Trim, collapse whitespace runs, lowercase."""
    return _WHITESPACE.sub(" ", command.strip()).lower()


def _norm_list(items: tuple[str, ...]) -> str:
    return ",".join(sorted(item.lower() for item in items))


def requirements_key(requirements: Optional[TaskRequirements]) -> str:
    """Order-insensitive, case-insensitive requirements fingerprint.

    Each list is lowercased and sorted on its own before joining, so
    ``["Numpy", "pandas"]`` and ``["pandas", "numpy"]`` agree.
    """
    if requirements is None:
        return ""
    python = (requirements.python or "").lower()
    x64 = "x64" if requirements.require_x64 else ""
    return (
        f"py={python}"
        f"|pkgs={_norm_list(requirements.packages)}"
        f"|feat={_norm_list(requirements.features)}"
        f"|tags={_norm_list(requirements.tags)}"
        f"|{x64}"
    )


def signature_for_run(run: RunRecord) -> TaskSignature:
    command = normalize_command(run.task.command)
    req_key = requirements_key(run.task.requirements)
    digest = sha256_hex(f"{run.task.name}|{command}|{req_key}")[:16]
    return TaskSignature(
        sig_id=f"task_{digest}",
        name=run.task.name,
        command=command,
        requirements_key=req_key,
    )

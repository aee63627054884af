"""Read-side adapters for the probe output and the run log.

These are the only places that touch the filesystem on the input side. The
probe writes a JSON array of reports; the router appends one JSON object per
line to the run log.
"""

from __future__ import annotations

import json
from collections import deque
from pathlib import Path
from typing import Union

from .exceptions import InputError, MalformedInputError
from .logging_config import get_logger
from .models import EnvironmentReport, RunRecord

logger = get_logger(__name__)

RUN_LOG_VERSION = "1.0"
DEFAULT_MAX_LINES = 5000


def load_reports(path: Union[str, Path]) -> list[EnvironmentReport]:
    """Load probe reports from a JSON array file.

    Raises:
        InputError: If the file cannot be read, is not JSON, is not an array,
            or holds an entry that is not a valid report
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise InputError(path, f"cannot read file: {e}")
    except UnicodeDecodeError as e:
        raise InputError(path, f"not valid UTF-8: {e}")
    except json.JSONDecodeError as e:
        raise InputError(path, f"invalid JSON: {e}")

    if not isinstance(data, list):
        raise InputError(path, "expected a JSON array of reports")

    reports: list[EnvironmentReport] = []
    for i, entry in enumerate(data):
        if not isinstance(entry, dict):
            raise InputError(path, f"entry {i} is not an object")
        try:
            reports.append(EnvironmentReport.from_dict(entry))
        except MalformedInputError as e:
            raise InputError(path, f"entry {i}: {e}")

    logger.debug(f"Loaded {len(reports)} reports from {path}")
    return reports


def read_run_log(path: Union[str, Path], max_lines: int = DEFAULT_MAX_LINES) -> list[RunRecord]:
    """Read the last ``max_lines`` records of a JSONL run log.

    A missing or unreadable log is an empty history. Undecodable bytes are
    replaced rather than fatal. Blank lines, lines that are not JSON, records
    of another schema version and records missing a required field are
    skipped.
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8", errors="replace") as f:
            tail = deque(f, maxlen=max_lines)
    except OSError as e:
        logger.debug(f"No run log at {path}: {e}")
        return []

    runs: list[RunRecord] = []
    skipped = 0
    for line in tail:
        line = line.strip()
        if not line:
            continue
        try:
            obj = json.loads(line)
        except json.JSONDecodeError:
            skipped += 1
            continue
        if not isinstance(obj, dict) or obj.get("version") != RUN_LOG_VERSION:
            skipped += 1
            continue
        try:
            runs.append(RunRecord.from_dict(obj))
        except MalformedInputError as e:
            logger.debug(f"Skipping run record: {e}")
            skipped += 1

    if skipped:
        logger.debug(f"Skipped {skipped} unusable line(s) in {path}")
    return runs

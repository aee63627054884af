"""Input exceptions: report files, run logs, wire records."""

from pathlib import Path
from typing import Optional

from .base import EnvMapError


class InputError(EnvMapError):
    """Raised when an input file cannot be read or has the wrong shape."""

    hint = "Reports must be a JSON array of probe reports, each with a pythonPath."

    def __init__(self, path: Path, reason: str):
        super().__init__(
            f"Cannot load input: {path}",
            details={"path": str(path), "reason": reason},
        )
        self.path = path
        self.reason = reason


class MalformedInputError(EnvMapError):
    """Raised when a wire record is missing a required field."""

    def __init__(self, kind: str, field_name: str, record_id: Optional[str] = None):
        details = {"kind": kind, "field": field_name}
        if record_id:
            details["record"] = record_id
        super().__init__(f"Malformed {kind}: missing '{field_name}'", details=details)
        self.kind = kind
        self.field_name = field_name

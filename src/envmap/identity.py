"""Stable, content-addressed identity for graph nodes and edges.

Every node and edge id is derived from a normalized semantic key, never from
insertion order or wall-clock time, so two maps built from the same inputs
carry the same id sets.

Rules:
  node / edge ids  -> "{kind}:{sha256(key)[:16]}"   kind in base | env | task | e
  fingerprints     -> "sha256:{sha256(key)[:24]}"
  diagram ids      -> "n_{sha256(node_id)[:10]}"

Path keys are case-folded by the *caller* (``norm_path``) on case-insensitive
platforms; the hash itself never touches case so the same primitive serves
every kind.
"""

import hashlib
import sys
from typing import Optional

NODE_ID_LENGTH = 16
FINGERPRINT_LENGTH = 24
DIAGRAM_ID_LENGTH = 10


def sha256_hex(text: str) -> str:
    """Full hex SHA-256 digest of UTF-8 encoded text."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def stable_id(kind: str, key: str) -> str:
    """Namespaced, truncated digest of an already-normalized key."""
    return f"{kind}:{sha256_hex(key)[:NODE_ID_LENGTH]}"


def fingerprint(key: str, length: int = FINGERPRINT_LENGTH) -> str:
    return f"sha256:{sha256_hex(key)[:length]}"


def diagram_id(node_id: str) -> str:
    """Identifier safe to use bare in Mermaid text (raw ids contain ':')."""
    return f"n_{sha256_hex(node_id)[:DIAGRAM_ID_LENGTH]}"


def is_case_insensitive_platform() -> bool:
    return sys.platform == "win32"


def norm_path(path: Optional[str], case_insensitive: Optional[bool] = None) -> str:
    """Normalize a path-like key before hashing.

    Args:
        path: Interpreter path, prefix, or any path-like key.
        case_insensitive: Force case folding on or off. ``None`` lets the
            current platform decide (Windows folds, POSIX keeps case).

    Returns:
        The normalized key, or "" for a missing path.
    """
    if not path:
        return ""
    if case_insensitive is None:
        case_insensitive = is_case_insensitive_platform()
    return path.lower() if case_insensitive else path

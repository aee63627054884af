"""Issue taxonomy: one immutable table for finding and failure codes.

Finding codes (from the probe) and error classes (from the run log) are an
open-ended, string-coded vocabulary. Instead of branching on codes across the
builder, insight rules and renderer, everything code-specific lives here:

  weight  standard probe penalty, used when a finding carries none
  hint    one-line remediation shown in top issues and insights
  glyph   short visual marker for hot edges in the diagram

Unknown codes resolve to ``FALLBACK`` so new probe codes never break a map.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

# Codes the builder and insight rules refer to by name
SSL_BROKEN = "SSL_BROKEN"
USER_SITE_LEAK = "USER_SITE_LEAK"
PYTHONPATH_INJECTED = "PYTHONPATH_INJECTED"
RUN_FAILED = "RUN_FAILED"

_RECREATE_HINT = "Investigate and apply the doctor fix plan; recreating the venv is often fastest."
_NATIVE_HINT = "Native deps mismatch; recreate venv with compatible Python + wheels."
_LEAK_HINT = "Path leakage; disable user-site, remove PYTHONPATH, prefer editable installs."


@dataclass(frozen=True)
class IssueInfo:
    weight: int
    hint: str
    glyph: str


FALLBACK = IssueInfo(weight=20, hint=_RECREATE_HINT, glyph="❗")

ISSUES: Mapping[str, IssueInfo] = MappingProxyType(
    {
        "PYTHON_EXEC_MISSING": IssueInfo(100, _RECREATE_HINT, "❗"),
        "NOT_A_VENV": IssueInfo(10, _RECREATE_HINT, "❗"),
        "ARCH_MISMATCH": IssueInfo(
            80, "Interpreter bitness does not match the task; use a 64-bit Python.", "\U0001f3d7️"
        ),
        "PIP_MISSING": IssueInfo(25, "pip is missing; run ensurepip or recreate the venv.", "\U0001f4e6"),
        "PIP_POINTS_TO_OTHER_PYTHON": IssueInfo(30, _RECREATE_HINT, "❗"),
        PYTHONPATH_INJECTED: IssueInfo(15, _LEAK_HINT, "\U0001f9f5"),
        "USER_SITE_ENABLED": IssueInfo(10, _LEAK_HINT, "❗"),
        USER_SITE_LEAK: IssueInfo(20, _LEAK_HINT, "\U0001f573️"),
        "PIP_CHECK_FAIL": IssueInfo(
            25, "Dependency conflicts; pip check then reinstall or recreate venv.", "\U0001f9e8"
        ),
        "MULTI_VERSION_ON_PATH": IssueInfo(20, _RECREATE_HINT, "❗"),
        "RESOLVER_CONFLICT_HINT": IssueInfo(15, _RECREATE_HINT, "❗"),
        "OUTDATED_INSTALL_TOOLING": IssueInfo(10, _RECREATE_HINT, "❗"),
        "IMPORT_FAIL": IssueInfo(35, _RECREATE_HINT, "❗"),
        "DLL_LOAD_FAIL": IssueInfo(55, _NATIVE_HINT, "\U0001f9e9"),
        "ABI_MISMATCH": IssueInfo(55, _NATIVE_HINT, "⚙️"),
        SSL_BROKEN: IssueInfo(40, "Fix base Python / OpenSSL; this blocks installs and HTTPS.", "\U0001f512"),
        "CERT_STORE_FAIL": IssueInfo(
            25, "TLS verification fails; install the org root CA or use an internal index.", "\U0001faaa"
        ),
        "SUBPROCESS_BROKEN": IssueInfo(40, _RECREATE_HINT, "❗"),
        "PYVENV_CFG_INVALID": IssueInfo(25, "Stale pyvenv.cfg; venv likely moved, recreate it.", "\U0001f9f1"),
        RUN_FAILED: IssueInfo(20, _RECREATE_HINT, "❗"),
        "RUNTIME_ERROR": IssueInfo(20, _RECREATE_HINT, "❗"),
    }
)


def lookup(code: str) -> IssueInfo:
    return ISSUES.get(code, FALLBACK)


def hint_for(code: str) -> str:
    return lookup(code).hint


def glyph_for(code: str) -> str:
    return lookup(code).glyph


def weight_for(code: str) -> int:
    return lookup(code).weight

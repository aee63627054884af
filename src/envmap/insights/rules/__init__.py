"""Insight rules: read the InsightContext and produce MapInsights.

Evaluation order is part of the output contract: insights appear in the
order the rules below are listed.
"""

from .blast_radius import BlastRadiusRule
from .contagion import ContagionRule
from .entropy import EntropyRule
from .env_flake import EnvFlakeRule
from .flaky_task import FlakyTaskRule
from .hotspot import HotspotRule
from .hygiene import HygieneRule
from .top_issue import TopIssueRule


def get_default_rules() -> list:
    """Return all default rules in evaluation order."""
    return [
        TopIssueRule(),
        BlastRadiusRule(),
        HygieneRule(),
        EntropyRule(),
        FlakyTaskRule(),
        EnvFlakeRule(),
        HotspotRule(),
        ContagionRule(),
    ]


__all__ = [
    "BlastRadiusRule",
    "ContagionRule",
    "EntropyRule",
    "EnvFlakeRule",
    "FlakyTaskRule",
    "HotspotRule",
    "HygieneRule",
    "TopIssueRule",
    "get_default_rules",
]

"""Insight synthesis: rule-based systemic risk findings over a built map."""

from .kernel import FALLBACK_TEXT, InsightKernel, fallback_insight, synthesize_insights
from .models import InsightContext, MapInsight
from .protocols import InsightRule
from .rules import get_default_rules

__all__ = [
    "FALLBACK_TEXT",
    "InsightContext",
    "InsightKernel",
    "InsightRule",
    "MapInsight",
    "fallback_insight",
    "get_default_rules",
    "synthesize_insights",
]

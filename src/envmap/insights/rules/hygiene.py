"""ECOSYSTEM_HYGIENE: user-site leaks or injected PYTHONPATH across envs."""

from __future__ import annotations

from ...taxonomy import PYTHONPATH_INJECTED, USER_SITE_LEAK
from ..models import InsightContext, MapInsight


class HygieneRule:
    name = "ecosystem_hygiene"

    def find(self, ctx: InsightContext) -> list[MapInsight]:
        leak_count = sum(1 for r in ctx.reports if r.has_code(USER_SITE_LEAK))
        pythonpath_count = sum(1 for r in ctx.reports if r.has_code(PYTHONPATH_INJECTED))

        minimum = ctx.thresholds.hygiene_min_reports
        if leak_count < minimum and pythonpath_count < minimum:
            return []

        return [
            MapInsight(
                severity="high",
                text=(
                    f"Ecosystem hygiene problem: {USER_SITE_LEAK} in {leak_count} env(s), "
                    f"{PYTHONPATH_INJECTED} in {pythonpath_count} env(s). "
                    'This causes "works here, fails there." '
                    "Lock these down (PYTHONNOUSERSITE=1, remove PYTHONPATH)."
                ),
                metadata={"leakCount": leak_count, "pyPathCount": pythonpath_count},
            )
        ]

"""Protocol for insight rules."""

from typing import Protocol

from .models import InsightContext, MapInsight


class InsightRule(Protocol):
    """Rules read the context (NEVER write) and return insights."""

    name: str

    def find(self, ctx: InsightContext) -> list[MapInsight]: ...

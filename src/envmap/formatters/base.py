"""Base formatter interface for envmap output rendering."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..api import MapResult


class BaseFormatter(ABC):
    """Abstract base class for output formatters."""

    @abstractmethod
    def render(self, result: MapResult) -> None:
        """Render a map result to stderr/stdout as appropriate."""

    @abstractmethod
    def format(self, result: MapResult) -> str:
        """Return formatted string representation of a map result."""

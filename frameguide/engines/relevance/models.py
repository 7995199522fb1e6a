"""Data models for relevance scoring."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class WorkUnit:
    """A unit of work (story) the agent is about to implement."""

    id: str
    title: str = ""
    description: str = ""
    acceptance_criteria: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)

    def search_text(self) -> str:
        """Lowercased free text the keyword matcher scans."""
        return " ".join([self.title, self.description, *self.acceptance_criteria]).lower()

"""Guidance sentinels and the line collector that watches for them."""

from __future__ import annotations

GUIDANCE_START = "<frameguide>GUIDANCE_START</frameguide>"
GUIDANCE_END = "<frameguide>GUIDANCE_END</frameguide>"

CITATION_TOKEN = "source:"


def has_citation(guidance: str) -> bool:
    return CITATION_TOKEN in guidance.lower()


class GuidanceCollector:
    """Accumulates the lines between the first start/end sentinel pair.

    Fed from stdout and stderr alike; either stream may carry the
    guidance. Sentinels must occupy a whole line (surrounding whitespace
    is ignored). An end sentinel without a preceding start is ignored.
    """

    def __init__(self) -> None:
        self._lines: list[str] = []
        self._inside = False
        self.complete = False

    def feed(self, line: str) -> None:
        if self.complete:
            return
        stripped = line.strip()
        if stripped == GUIDANCE_START:
            self._inside = True
            return
        if stripped == GUIDANCE_END:
            if self._inside:
                self._inside = False
                self.complete = True
            return
        if self._inside:
            self._lines.append(line.rstrip("\r\n"))

    @property
    def guidance(self) -> str:
        return "\n".join(self._lines).strip()


def extract_between_markers(text: str) -> str | None:
    """Return the trimmed text between the sentinels, or None if not bracketed."""
    collector = GuidanceCollector()
    for line in text.splitlines():
        collector.feed(line)
        if collector.complete:
            return collector.guidance
    return None

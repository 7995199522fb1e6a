"""Tests for the guidance Markdown formatter."""

from __future__ import annotations

from pathlib import Path

from frameguide.engines.consultation import (
    FALLBACK_INSTRUCTIONS,
    ConsultationResult,
    ResourceConsultation,
    format_guidance,
)
from frameguide.engines.resource_manager.models import CachedResource


def _res(name: str) -> CachedResource:
    return CachedResource(name=name, version="1", path=Path(f"/cache/{name}@1"), url="u")


class TestFormatGuidance:
    def test_nothing_consulted_gives_web_search_block(self):
        assert format_guidance(None) == FALLBACK_INSTRUCTIONS
        assert format_guidance(ConsultationResult()) == FALLBACK_INSTRUCTIONS
        assert "web search" in FALLBACK_INSTRUCTIONS

    def test_success_sections(self):
        result = ConsultationResult(
            consultations=[
                ResourceConsultation("next", "Use app router.\nSource: a.ts"),
                ResourceConsultation("react", "Use hooks.\nSource: b.js"),
            ]
        )
        out = format_guidance(result)
        assert out.startswith("## Framework Implementation Guidance\n")
        assert "### next\n\nUse app router.\nSource: a.ts\n" in out
        assert out.index("### next") < out.index("### react")
        assert "Additional Framework References" not in out

    def test_fallback_only(self):
        out = format_guidance(ConsultationResult(fallback_paths=[_res("prisma")]))
        assert "## Additional Framework References" in out
        assert "- **prisma**: `/cache/prisma@1`" in out
        assert "Framework Implementation Guidance" not in out

    def test_mixed(self):
        result = ConsultationResult(
            consultations=[ResourceConsultation("next", "Source: a.ts")],
            fallback_paths=[_res("prisma")],
        )
        out = format_guidance(result)
        assert out.index("Framework Implementation Guidance") < out.index(
            "Additional Framework References"
        )

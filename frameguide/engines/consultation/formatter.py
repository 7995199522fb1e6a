"""Render consultation results as a Markdown block for the agent prompt."""

from __future__ import annotations

from frameguide.engines.consultation.models import ConsultationResult

FALLBACK_INSTRUCTIONS = """\
## Documentation Verification

Before committing, verify your implementation against current official documentation using web search:

- Search for the official docs of any library or framework you used
- Confirm APIs you used are current and not deprecated
- Verify configuration patterns follow current conventions
- Check security patterns (input validation, auth, etc.) are up to date

Do not rely on memory alone; docs change between versions. Verify against the latest.
"""


def format_guidance(result: ConsultationResult | None) -> str:
    """Success sections per framework, then local paths for the failures.

    With nothing consulted at all, returns the web-search verification
    block instead.
    """
    if result is None or result.empty:
        return FALLBACK_INSTRUCTIONS

    lines: list[str] = []

    if result.consultations:
        lines += [
            "## Framework Implementation Guidance",
            "",
            "The following guidance was generated from cached framework source code. "
            "Use it to ensure correct API usage and patterns.",
            "",
        ]
        for c in result.consultations:
            lines += [f"### {c.framework}", "", c.guidance, ""]

    if result.fallback_paths:
        lines += [
            "## Additional Framework References",
            "",
            "Consultation failed for these frameworks. Their source is cached locally; "
            "search for specific patterns:",
            "",
        ]
        for fb in result.fallback_paths:
            lines.append(f"- **{fb.name}**: `{fb.path}` (grep for the specific APIs/patterns you need)")
        lines.append("")

    return "\n".join(lines)

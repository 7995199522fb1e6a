"""Prompts for framework consultation subprocesses."""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping

from frameguide.engines.consultation.markers import GUIDANCE_END, GUIDANCE_START

CONSULT_PROMPT = f"""\
You are a framework expert consulting on ONE framework for ONE unit of work.

# Framework
{{{{framework}}}}, source checked out at `{{{{framework_path}}}}`

# Unit of work
- ID: {{{{unit_id}}}}
- Title: {{{{unit_title}}}}
- Tech stack: {{{{tech_stack}}}}

## Description
{{{{unit_description}}}}

## Acceptance criteria
{{{{acceptance_criteria}}}}

# Task
Read the framework SOURCE at the path above (not your memory of it) and write
implementation guidance for this unit of work:
1. Which APIs, components or modules to use, with exact import paths
2. The correct usage pattern for this version, shown as a short example
3. Pitfalls: deprecated APIs, version-specific behaviour, common mistakes

# Rules
- Every claim must cite the file it came from, on its own line, as
  `Source: <path relative to the framework root>`
- Guidance without at least one Source: line is discarded
- Do not modify any files
- Keep it between {{{{min_words}}}} and {{{{max_words}}}} words

# Output format
Print the guidance between these two marker lines, each on a line by itself:

{GUIDANCE_START}
...your guidance...
{GUIDANCE_END}
"""

CONSULT_FEATURE_PROMPT = f"""\
You are a framework expert consulting on ONE framework for a whole feature.

# Framework
{{{{framework}}}}, source checked out at `{{{{framework_path}}}}`

# Feature
{{{{feature}}}} (tech stack: {{{{tech_stack}}}})

# Task
Read the framework SOURCE at the path above (not your memory of it) and
summarise what someone planning or verifying this feature needs to know:
1. The idiomatic project structure and the APIs the feature will touch
2. Configuration the feature is likely to need
3. Version-specific behaviour and deprecated APIs to avoid

# Rules
- Every claim must cite the file it came from, on its own line, as
  `Source: <path relative to the framework root>`
- Guidance without at least one Source: line is discarded
- Do not modify any files
- Keep it between {{{{min_words}}}} and {{{{max_words}}}} words

# Output format
Print the guidance between these two marker lines, each on a line by itself:

{GUIDANCE_START}
...your guidance...
{GUIDANCE_END}
"""

DEFAULT_TEMPLATES: dict[str, str] = {
    "consult": CONSULT_PROMPT,
    "consult-feature": CONSULT_FEATURE_PROMPT,
}

_PLACEHOLDER_RE = re.compile(r"\{\{(\w+)\}\}")


class PromptTemplates(Mapping[str, str]):
    """Template name -> text, injected at construction.

    ``{{var}}`` placeholders are substituted by :meth:`render`; placeholders
    with no value are left as they are.
    """

    def __init__(self, templates: Mapping[str, str] | None = None) -> None:
        self._templates = dict(DEFAULT_TEMPLATES if templates is None else templates)

    def __getitem__(self, name: str) -> str:
        return self._templates[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._templates)

    def __len__(self) -> int:
        return len(self._templates)

    def render(self, name: str, **values: object) -> str:
        template = self._templates[name]

        def _sub(match: re.Match[str]) -> str:
            key = match.group(1)
            if key not in values:
                return match.group(0)
            return str(values[key])

        return _PLACEHOLDER_RE.sub(_sub, template)

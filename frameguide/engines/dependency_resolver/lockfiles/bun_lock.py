"""Reader for bun.lock (JSON with comments and trailing commas)."""

from __future__ import annotations

import json
import re

from frameguide.engines.dependency_resolver.lockfiles.registry import register_reader
from frameguide.engines.dependency_resolver.versions import split_at_version

_TRAILING_COMMA_RE = re.compile(r",(\s*[}\]])")


def strip_json_comments(content: str) -> str:
    """Drop whole-line ``//`` comments from JSONC content."""
    return "\n".join(
        line for line in content.splitlines() if not line.lstrip().startswith("//")
    )


class BunLockReader:
    ecosystem = "npm"
    filename = "bun.lock"
    priority = 10

    def parse(self, content: str) -> dict[str, str]:
        text = _TRAILING_COMMA_RE.sub(r"\1", strip_json_comments(content))
        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            return {}
        packages = data.get("packages") if isinstance(data, dict) else None
        if not isinstance(packages, dict):
            return {}

        versions: dict[str, str] = {}
        for key, value in packages.items():
            # Older layout: the key itself is "name@version". A "/" after the
            # split means a nested install path such as "next/@swc/helpers".
            name, version = split_at_version(key)
            if name and version and "/" not in version:
                versions[name] = version
                continue
            if not name:
                continue
            # Current layout: key is the install name, value[0] is "name@version".
            # Keys like "next/postcss" are nested copies and must not
            # shadow the top-level entry, so the names have to agree.
            if isinstance(value, list) and value and isinstance(value[0], str):
                ident_name, ident_version = split_at_version(value[0])
                if ident_name == key and ident_version:
                    versions[ident_name] = ident_version
        return versions


register_reader(BunLockReader())

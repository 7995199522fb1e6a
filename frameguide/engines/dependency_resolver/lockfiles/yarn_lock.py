"""Reader for yarn.lock — classic (v1) and berry (v2+) variants.

v1::

    "zod@^3.22.0", zod@^3.23.0:
      version "3.24.4"

berry::

    "zod@npm:^3.22.0, zod@npm:^3.23.0":
      version: 3.24.4
"""

from __future__ import annotations

from frameguide.engines.dependency_resolver.lockfiles.registry import register_reader
from frameguide.engines.dependency_resolver.versions import split_at_version


def parse_header(header: str) -> list[str]:
    """Package names declared by a header line (without the trailing colon)."""
    names: list[str] = []
    for raw in header.split(","):
        spec = raw.strip().strip('"')
        if not spec or spec.startswith("__metadata") or "@patch:" in spec:
            continue
        # berry: "zod@npm:^3.22.0" -> "zod@^3.22.0"
        idx = spec.find("@npm:", 1)
        if idx >= 0:
            spec = spec[:idx] + "@" + spec[idx + len("@npm:") :]
        name, _ = split_at_version(spec)
        if name and name not in names:
            names.append(name)
    return names


def extract_version(line: str) -> str:
    """``version "3.24.4"`` (v1) or ``version: 3.24.4`` (berry) -> ``3.24.4``."""
    value = line.strip()[len("version") :].strip()
    if value.startswith(":"):
        value = value[1:].strip()
    return value.strip('"')


class YarnLockReader:
    ecosystem = "npm"
    filename = "yarn.lock"
    priority = 30

    def parse(self, content: str) -> dict[str, str]:
        versions: dict[str, str] = {}
        current: list[str] = []

        for line in content.splitlines():
            trimmed = line.strip()
            if not trimmed or trimmed.startswith("#"):
                continue

            if not line.startswith((" ", "\t")):
                current = parse_header(trimmed[:-1]) if trimmed.endswith(":") else []
                continue

            if current and (trimmed.startswith("version ") or trimmed.startswith("version:")):
                version = extract_version(trimmed)
                if version:
                    for name in current:
                        versions[name] = version
                current = []

        return versions


register_reader(YarnLockReader())

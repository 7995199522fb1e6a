"""Reader for pnpm-lock.yaml.

Entries live under the top-level ``packages:`` section::

    packages:
      /zod@3.24.4:                         # v6-v8
      zod@3.24.4:                          # v9+
      '@prisma/client@5.22.0(prisma@5.22.0)':
"""

from __future__ import annotations

from frameguide.engines.dependency_resolver.lockfiles.registry import register_reader
from frameguide.engines.dependency_resolver.versions import split_at_version


class PnpmLockReader:
    ecosystem = "npm"
    filename = "pnpm-lock.yaml"
    priority = 40

    def parse(self, content: str) -> dict[str, str]:
        versions: dict[str, str] = {}
        in_packages = False

        for line in content.splitlines():
            if not line.strip() or line.lstrip().startswith("#"):
                continue

            top_level = not line.startswith((" ", "\t"))
            if top_level:
                if in_packages:
                    break
                in_packages = line.rstrip() == "packages:"
                continue
            if not in_packages:
                continue

            trimmed = line.strip()
            if not trimmed.endswith(":"):
                continue
            indent = len(line) - len(line.lstrip(" "))
            if indent not in (2, 4):
                continue

            entry = trimmed[:-1].strip("'\"")
            if entry.startswith("/"):
                entry = entry[1:]
            paren = entry.find("(")
            if paren > 0:
                entry = entry[:paren]

            name, version = split_at_version(entry)
            if name and version:
                versions[name] = version

        return versions


register_reader(PnpmLockReader())

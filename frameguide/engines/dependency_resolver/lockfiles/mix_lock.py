"""Reader for Elixir mix.lock."""

from __future__ import annotations

import re

from frameguide.engines.dependency_resolver.lockfiles.registry import register_reader

# "phoenix": {:hex, :phoenix, "1.7.10", "sha", [:mix], [...], "hexpm", "sha"},
_ENTRY_RE = re.compile(r'^\s*"([^"]+)":\s*\{:hex,\s*:"?[\w.]+"?,\s*"([^"]+)"')


class MixLockReader:
    ecosystem = "hex"
    filename = "mix.lock"
    priority = 10

    def parse(self, content: str) -> dict[str, str]:
        versions: dict[str, str] = {}
        for line in content.splitlines():
            m = _ENTRY_RE.match(line)
            if m:
                versions[m.group(1)] = m.group(2)
        return versions


register_reader(MixLockReader())

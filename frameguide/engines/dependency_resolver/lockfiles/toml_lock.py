"""Readers for TOML lock files with ``[[package]]`` tables.

Cargo.lock, uv.lock and poetry.lock all record one table per installed
package with ``name`` and ``version`` keys.
"""

from __future__ import annotations

import tomllib
from collections.abc import Callable

from frameguide.engines.dependency_resolver.lockfiles.registry import register_reader
from frameguide.engines.dependency_resolver.versions import normalize_python_name


class TomlPackageLockReader:
    def __init__(
        self,
        ecosystem: str,
        filename: str,
        priority: int,
        normalize: Callable[[str], str] | None = None,
    ) -> None:
        self.ecosystem = ecosystem
        self.filename = filename
        self.priority = priority
        self._normalize = normalize

    def parse(self, content: str) -> dict[str, str]:
        try:
            data = tomllib.loads(content)
        except tomllib.TOMLDecodeError:
            return {}

        versions: dict[str, str] = {}
        for pkg in data.get("package", []):
            if not isinstance(pkg, dict):
                continue
            name, version = pkg.get("name"), pkg.get("version")
            if not isinstance(name, str) or not isinstance(version, str):
                continue
            if self._normalize is not None:
                name = self._normalize(name)
            versions[name] = version
        return versions


register_reader(TomlPackageLockReader("crates", "Cargo.lock", 10))
register_reader(TomlPackageLockReader("pypi", "uv.lock", 10, normalize_python_name))
register_reader(TomlPackageLockReader("pypi", "poetry.lock", 20, normalize_python_name))

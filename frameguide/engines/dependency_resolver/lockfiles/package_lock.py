"""Reader for npm package-lock.json (lockfileVersion 1–3)."""

from __future__ import annotations

import json

from frameguide.engines.dependency_resolver.lockfiles.registry import register_reader

_PREFIX = "node_modules/"


class PackageLockReader:
    ecosystem = "npm"
    filename = "package-lock.json"
    priority = 20

    def parse(self, content: str) -> dict[str, str]:
        try:
            data = json.loads(content)
        except json.JSONDecodeError:
            return {}
        if not isinstance(data, dict):
            return {}

        versions: dict[str, str] = {}
        packages = data.get("packages")
        if isinstance(packages, dict):
            for key, pkg in packages.items():
                if not key.startswith(_PREFIX) or not isinstance(pkg, dict):
                    continue
                name = key[len(_PREFIX) :]
                # node_modules/a/node_modules/b is a nested copy of b
                if _PREFIX in name:
                    continue
                version = pkg.get("version")
                if isinstance(version, str) and version:
                    versions[name] = version
            return versions

        # lockfileVersion 1 has only the top-level "dependencies" tree
        deps = data.get("dependencies")
        if isinstance(deps, dict):
            for name, pkg in deps.items():
                if isinstance(pkg, dict) and isinstance(pkg.get("version"), str):
                    versions[name] = pkg["version"]
        return versions


register_reader(PackageLockReader())

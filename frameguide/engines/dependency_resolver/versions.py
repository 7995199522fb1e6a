"""Version helpers — specifier cleanup, name@version splitting, filtering."""

from __future__ import annotations

import re

from frameguide.engines.dependency_resolver.models import Dependency

# Longest operators first so "~>" is not read as "~" followed by ">".
_RANGE_PREFIXES = ("^", "~>", "~", ">=", "<=", "==", "!=", ">", "<", "=")

_LOCAL_SPEC_PREFIXES = ("workspace:", "file:", "link:", "portal:")

_PEP503_RE = re.compile(r"[-_.]+")


def clean_version(spec: str) -> str:
    """Strip range qualifiers from a manifest specifier: ``"^3.22.0" -> "3.22.0"``."""
    v = spec.strip()
    for prefix in _RANGE_PREFIXES:
        if v.startswith(prefix):
            v = v[len(prefix) :]
    return v.strip()


def split_at_version(spec: str) -> tuple[str, str]:
    """Split ``name@version`` into ``(name, version)``.

    The separator is the last ``@`` not at position 0, so scoped names
    (``@scope/name@1.0.0``) work. Returns ``(spec, "")`` when there is no
    version part and ``("", "")`` when the version is a protocol reference
    such as ``workspace:*`` or ``file:../x``.
    """
    at = spec.rfind("@")
    if at <= 0:
        return spec, ""
    name, version = spec[:at], spec[at + 1 :]
    if ":" in version:
        return "", ""
    return name, version


def normalize_python_name(name: str) -> str:
    return _PEP503_RE.sub("-", name).lower()


def should_resolve(dep: Dependency, ecosystem: str) -> bool:
    """Whether a declared dependency is worth looking up at all."""
    # DefinitelyTyped monorepo: type stubs only
    if dep.name.startswith("@types/"):
        return False
    # Go marks indirect requirements; they are transitive noise
    if ecosystem == "go" and dep.is_dev:
        return False
    if dep.version.startswith(_LOCAL_SPEC_PREFIXES):
        return False
    return True


def ecosystem_from_tech_stack(tech_stack: str) -> str:
    """Map a detected tech stack to an ecosystem identifier ("" if unknown)."""
    return {
        "typescript": "npm",
        "javascript": "npm",
        "go": "go",
        "python": "pypi",
        "rust": "crates",
        "elixir": "hex",
    }.get(tech_stack, "")

"""npm registry resolver."""

from __future__ import annotations

import httpx

from frameguide.engines.dependency_resolver.ecosystems.base import fetch_json, register_resolver
from frameguide.engines.dependency_resolver.normalize import normalize_repo_url
from frameguide.exceptions import PackageNotFoundError

NPM_REGISTRY = "https://registry.npmjs.org"

_SHORTHAND_HOSTS = {
    "github:": "https://github.com/",
    "gitlab:": "https://gitlab.com/",
    "bitbucket:": "https://bitbucket.org/",
}


def expand_shorthand(repo: str) -> str:
    """Expand npm repository shorthands (``github:user/repo``, ``user/repo``)."""
    for prefix, base in _SHORTHAND_HOSTS.items():
        if repo.startswith(prefix):
            return base + repo[len(prefix) :]
    # bare "user/repo" defaults to GitHub
    if "://" not in repo and ":" not in repo and "@" not in repo and repo.count("/") == 1:
        return "https://github.com/" + repo
    return repo


class NpmResolver:
    ecosystem = "npm"

    async def resolve(self, name: str, client: httpx.AsyncClient) -> str:
        # The /latest document carries "repository" without the full
        # version history, which can run to many megabytes.
        data = await fetch_json(
            client, f"{NPM_REGISTRY}/{name}/latest", name=name, registry="npm"
        )
        repo = data.get("repository")

        raw: str | None = None
        if isinstance(repo, str) and repo:
            raw = expand_shorthand(repo)
        elif isinstance(repo, dict) and isinstance(repo.get("url"), str) and repo["url"]:
            raw = expand_shorthand(repo["url"])

        if raw is None:
            raise PackageNotFoundError(name, "no repository field on npm")
        return normalize_repo_url(raw)


register_resolver(NpmResolver())

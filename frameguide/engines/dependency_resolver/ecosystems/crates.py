"""crates.io resolver."""

from __future__ import annotations

import httpx

from frameguide import __version__
from frameguide.engines.dependency_resolver.ecosystems.base import fetch_json, register_resolver
from frameguide.engines.dependency_resolver.normalize import normalize_repo_url
from frameguide.exceptions import PackageNotFoundError

CRATES_IO_API = "https://crates.io/api/v1/crates"

# crates.io rejects requests without a descriptive User-Agent
_HEADERS = {"User-Agent": f"frameguide-resolver/{__version__}"}


class CratesResolver:
    ecosystem = "crates"

    async def resolve(self, name: str, client: httpx.AsyncClient) -> str:
        data = await fetch_json(
            client, f"{CRATES_IO_API}/{name}", name=name, registry="crates.io", headers=_HEADERS
        )
        crate = data.get("crate") or {}
        repo = crate.get("repository") if isinstance(crate, dict) else None
        if not isinstance(repo, str) or not repo:
            raise PackageNotFoundError(name, "no repository URL on crates.io")
        return normalize_repo_url(repo)


register_resolver(CratesResolver())

"""PyPI resolver."""

from __future__ import annotations

import httpx

from frameguide.engines.dependency_resolver.ecosystems.base import (
    fetch_json,
    pick_link,
    register_resolver,
)
from frameguide.engines.dependency_resolver.normalize import has_forge_domain, normalize_repo_url
from frameguide.exceptions import PackageNotFoundError

PYPI_JSON_API = "https://pypi.org/pypi/{name}/json"

# Keys to check in project_urls, in priority order
_REPO_KEYS = ("Source", "Repository", "GitHub", "Source Code", "Homepage", "Code")


class PyPIResolver:
    ecosystem = "pypi"

    async def resolve(self, name: str, client: httpx.AsyncClient) -> str:
        data = await fetch_json(
            client, PYPI_JSON_API.format(name=name), name=name, registry="pypi"
        )
        info = data.get("info") or {}

        project_urls = info.get("project_urls") or {}
        url = pick_link(project_urls, _REPO_KEYS) if isinstance(project_urls, dict) else None

        if url is None:
            home_page = info.get("home_page") or ""
            if isinstance(home_page, str) and has_forge_domain(home_page):
                url = home_page

        if url is None:
            raise PackageNotFoundError(name, "no repository URL on pypi")
        return normalize_repo_url(url)


register_resolver(PyPIResolver())

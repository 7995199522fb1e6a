"""Go module resolver — forge paths directly, vanity paths via ?go-get=1."""

from __future__ import annotations

import re

import httpx

from frameguide.engines.dependency_resolver.ecosystems.base import fetch_body, register_resolver
from frameguide.engines.dependency_resolver.normalize import normalize_repo_url
from frameguide.exceptions import PackageNotFoundError

# Module paths that map to browsable repo URLs
_HOST_PREFIXES = ("github.com/", "gitlab.com/", "bitbucket.org/")

_VANITY_LIMIT = 256 * 1024

# <meta name="go-import" content="prefix vcs repo-url">
_GO_IMPORT_RE = re.compile(rb'<meta\s+name="go-import"\s+content="([^"]+)"', re.IGNORECASE)


def repo_url_from_module(module_path: str) -> str | None:
    """Derive a repo URL from a forge-hosted module path without any network call.

    Returns None for vanity paths and for forge paths shorter than
    host/owner/repo.
    """
    for prefix in _HOST_PREFIXES:
        if module_path.startswith(prefix):
            parts = module_path.split("/")
            if len(parts) >= 3:
                return "https://" + "/".join(parts[:3])
    return None


def parse_go_import(body: bytes) -> str | None:
    m = _GO_IMPORT_RE.search(body)
    if not m:
        return None
    fields = m.group(1).decode("utf-8", errors="replace").split()
    if len(fields) < 3:
        return None
    return fields[2]


class GoResolver:
    ecosystem = "go"

    async def resolve(self, name: str, client: httpx.AsyncClient) -> str:
        direct = repo_url_from_module(name)
        if direct is not None:
            return direct

        body = await fetch_body(
            client,
            f"https://{name}?go-get=1",
            name=name,
            registry="go vanity host",
            limit=_VANITY_LIMIT,
            truncate=True,
        )
        url = parse_go_import(body)
        if url is None:
            raise PackageNotFoundError(name, "no go-import meta tag")
        return normalize_repo_url(url)


register_resolver(GoResolver())

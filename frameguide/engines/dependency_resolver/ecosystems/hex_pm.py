"""hex.pm resolver (Elixir / Erlang)."""

from __future__ import annotations

import httpx

from frameguide.engines.dependency_resolver.ecosystems.base import (
    fetch_json,
    pick_link,
    register_resolver,
)
from frameguide.engines.dependency_resolver.normalize import normalize_repo_url
from frameguide.exceptions import PackageNotFoundError

HEX_API = "https://hex.pm/api/packages"

_LINK_KEYS = ("GitHub", "Source", "Repository")


class HexResolver:
    ecosystem = "hex"

    async def resolve(self, name: str, client: httpx.AsyncClient) -> str:
        data = await fetch_json(client, f"{HEX_API}/{name}", name=name, registry="hex.pm")
        meta = data.get("meta") or {}
        links = meta.get("links") if isinstance(meta, dict) else None
        # hex link labels are free-form; a "GitHub" label is trusted as-is
        url = pick_link(links, _LINK_KEYS, require_forge=False) if isinstance(links, dict) else None
        if url is None:
            raise PackageNotFoundError(name, "no repository link on hex.pm")
        return normalize_repo_url(url)


register_resolver(HexResolver())

"""Resolver registry and shared HTTP helpers for package registry lookups."""

from __future__ import annotations

import json
from typing import Any, Protocol, runtime_checkable

import httpx

from frameguide.engines.dependency_resolver.normalize import has_forge_domain
from frameguide.exceptions import (
    BadResponseError,
    PackageNotFoundError,
    RateLimitedError,
    UnsupportedEcosystemError,
)

MAX_BODY_BYTES = 1 << 20  # 1 MiB


@runtime_checkable
class EcosystemResolver(Protocol):
    """Interface that every ecosystem resolver must satisfy."""

    ecosystem: str

    async def resolve(self, name: str, client: httpx.AsyncClient) -> str: ...


RESOLVER_REGISTRY: dict[str, EcosystemResolver] = {}


def register_resolver(resolver: EcosystemResolver) -> None:
    RESOLVER_REGISTRY[resolver.ecosystem] = resolver


async def resolve_repo_url(name: str, ecosystem: str, client: httpx.AsyncClient) -> str:
    """Resolve *name* to a normalized source-repository URL for *ecosystem*."""
    resolver = RESOLVER_REGISTRY.get(ecosystem)
    if resolver is None:
        raise UnsupportedEcosystemError(name, f"unsupported ecosystem: {ecosystem!r}")
    return await resolver.resolve(name, client)


async def fetch_body(
    client: httpx.AsyncClient,
    url: str,
    *,
    name: str,
    registry: str,
    limit: int = MAX_BODY_BYTES,
    truncate: bool = False,
    headers: dict[str, str] | None = None,
) -> bytes:
    """GET *url* and return at most *limit* bytes of the body.

    Status handling: 404 -> :class:`PackageNotFoundError`, 429 ->
    :class:`RateLimitedError`, anything else but 200 ->
    :class:`BadResponseError`. A body larger than *limit* is an error
    unless *truncate* is set, in which case the prefix is returned.
    """
    try:
        async with client.stream("GET", url, headers=headers) as resp:
            if resp.status_code == 404:
                raise PackageNotFoundError(name, f"package not found on {registry}")
            if resp.status_code == 429:
                raise RateLimitedError(name, f"{registry} rate limited")
            if resp.status_code != 200:
                raise BadResponseError(name, f"{registry} returned {resp.status_code}")

            chunks: list[bytes] = []
            total = 0
            async for chunk in resp.aiter_bytes():
                total += len(chunk)
                if total > limit:
                    if truncate:
                        chunks.append(chunk[: limit - (total - len(chunk))])
                        break
                    raise BadResponseError(name, f"{registry} response exceeds {limit} bytes")
                chunks.append(chunk)
            return b"".join(chunks)
    except httpx.HTTPError as exc:
        raise BadResponseError(name, f"{registry} request failed: {exc}") from exc


async def fetch_json(
    client: httpx.AsyncClient,
    url: str,
    *,
    name: str,
    registry: str,
    headers: dict[str, str] | None = None,
) -> dict[str, Any]:
    body = await fetch_body(client, url, name=name, registry=registry, headers=headers)
    try:
        data = json.loads(body)
    except ValueError as exc:
        raise BadResponseError(name, f"failed to parse {registry} response") from exc
    if not isinstance(data, dict):
        raise BadResponseError(name, f"unexpected {registry} response shape")
    return data


def pick_link(
    links: dict[str, Any],
    preferred_keys: tuple[str, ...],
    *,
    require_forge: bool = True,
) -> str | None:
    """First plausible repository URL from a ``{label: url}`` mapping.

    Preferred keys are matched case-insensitively first; then any value
    pointing at a known forge is accepted.
    """
    lowered = {
        str(k).lower(): v for k, v in links.items() if isinstance(v, str) and v
    }
    for key in preferred_keys:
        url = lowered.get(key.lower())
        if url and (not require_forge or has_forge_domain(url)):
            return url
    for url in lowered.values():
        if has_forge_domain(url):
            return url
    return None

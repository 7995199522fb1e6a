"""Shared pytest fixtures for frameguide tests."""

from __future__ import annotations

import sys
import textwrap
from collections.abc import Callable
from pathlib import Path

import httpx
import pytest
import pytest_asyncio

from frameguide.core.config import ProviderConfig


@pytest_asyncio.fixture
async def make_client():
    """Factory for ``httpx.AsyncClient`` instances backed by a MockTransport."""
    clients: list[httpx.AsyncClient] = []

    def _make(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
        client = httpx.AsyncClient(
            transport=httpx.MockTransport(handler), follow_redirects=True
        )
        clients.append(client)
        return client

    yield _make
    for client in clients:
        await client.aclose()


@pytest.fixture
def make_provider(tmp_path: Path):
    """Write a Python script standing in for the reasoning CLI.

    Returns a factory ``(body, prompt_mode="stdin", prompt_flag="") -> ProviderConfig``.
    """
    counter = {"n": 0}

    def _make(body: str, prompt_mode: str = "stdin", prompt_flag: str = "") -> ProviderConfig:
        counter["n"] += 1
        script = tmp_path / f"provider_{counter['n']}.py"
        script.write_text(textwrap.dedent(body), encoding="utf-8")
        return ProviderConfig(
            command=sys.executable,
            args=[str(script)],
            prompt_mode=prompt_mode,
            prompt_flag=prompt_flag,
        )

    return _make

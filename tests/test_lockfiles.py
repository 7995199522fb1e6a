"""Tests for the lock-file readers."""

from __future__ import annotations

import json
import textwrap
from pathlib import Path

from frameguide.engines.dependency_resolver.lockfiles.bun_lock import (
    BunLockReader,
    strip_json_comments,
)
from frameguide.engines.dependency_resolver.lockfiles.mix_lock import MixLockReader
from frameguide.engines.dependency_resolver.lockfiles.package_lock import PackageLockReader
from frameguide.engines.dependency_resolver.lockfiles.pnpm_lock import PnpmLockReader
from frameguide.engines.dependency_resolver.lockfiles.registry import (
    READER_REGISTRY,
    read_lock_versions,
    read_lockfile,
)
from frameguide.engines.dependency_resolver.lockfiles.yarn_lock import (
    YarnLockReader,
    extract_version,
    parse_header,
)


def _write(root: Path, name: str, content: str) -> None:
    (root / name).write_text(textwrap.dedent(content), encoding="utf-8")


# ── registry ─────────────────────────────────────────────────────────────


class TestReaderRegistry:
    def test_node_priority_order(self):
        names = [r.filename for r in READER_REGISTRY["npm"]]
        assert names == ["bun.lock", "package-lock.json", "yarn.lock", "pnpm-lock.yaml"]

    def test_other_ecosystems_registered(self):
        assert [r.filename for r in READER_REGISTRY["pypi"]] == ["uv.lock", "poetry.lock"]
        assert [r.filename for r in READER_REGISTRY["crates"]] == ["Cargo.lock"]
        assert [r.filename for r in READER_REGISTRY["hex"]] == ["mix.lock"]

    def test_missing_file_is_none(self, tmp_path):
        assert read_lockfile(BunLockReader(), tmp_path) is None
        assert read_lock_versions("npm", tmp_path) is None

    def test_first_format_with_entries_wins(self, tmp_path):
        _write(tmp_path, "yarn.lock", 'zod@^3.0.0:\n  version "3.0.0"\n')
        _write(
            tmp_path,
            "package-lock.json",
            json.dumps({"packages": {"node_modules/zod": {"version": "3.24.4"}}}),
        )
        filename, versions = read_lock_versions("npm", tmp_path)
        assert filename == "package-lock.json"
        assert versions == {"zod": "3.24.4"}

    def test_empty_higher_priority_file_is_skipped(self, tmp_path):
        _write(tmp_path, "bun.lock", "not json at all")
        _write(tmp_path, "yarn.lock", 'zod@^3.0.0:\n  version "3.0.0"\n')
        filename, versions = read_lock_versions("npm", tmp_path)
        assert filename == "yarn.lock"
        assert versions == {"zod": "3.0.0"}


# ── bun.lock ─────────────────────────────────────────────────────────────


class TestBunLock:
    def test_strip_comments(self):
        assert strip_json_comments('// header\n{"a": 1}\n  // x') == '{"a": 1}'

    def test_array_values(self):
        content = """\
        // bun lockfile
        {
          "lockfileVersion": 1,
          "packages": {
            "zod": ["zod@3.24.4", "", {}, "sha512-abc"],
            "@prisma/client": ["@prisma/client@5.22.0", "", {}, "sha512-def"],
            "next/postcss": ["postcss@8.4.31", "", {}, "sha512-ghi"],
            "my-app": ["my-app@workspace:packages/app"],
          },
        }
        """
        versions = BunLockReader().parse(textwrap.dedent(content))
        assert versions == {"zod": "3.24.4", "@prisma/client": "5.22.0"}

    def test_name_at_version_keys(self):
        content = '{"packages": {"zod@3.24.4": {}, "@scope/pkg@1.0.0": {}}}'
        assert BunLockReader().parse(content) == {"zod": "3.24.4", "@scope/pkg": "1.0.0"}

    def test_nested_scoped_keys_are_skipped(self):
        content = json.dumps(
            {
                "packages": {
                    "next": ["next@15.0.0", "", {}, "sha512-a"],
                    "@swc/helpers": ["@swc/helpers@0.5.15", "", {}, "sha512-b"],
                    "next/@swc/helpers": ["@swc/helpers@0.5.5", "", {}, "sha512-c"],
                }
            }
        )
        assert BunLockReader().parse(content) == {"next": "15.0.0", "@swc/helpers": "0.5.15"}

    def test_invalid_json(self):
        assert BunLockReader().parse("{nope") == {}


# ── package-lock.json ────────────────────────────────────────────────────


class TestPackageLock:
    def test_v3_packages(self):
        content = json.dumps(
            {
                "lockfileVersion": 3,
                "packages": {
                    "": {"name": "app", "version": "1.0.0"},
                    "node_modules/zod": {"version": "3.24.4"},
                    "node_modules/@prisma/client": {"version": "5.22.0"},
                    "node_modules/next/node_modules/postcss": {"version": "8.4.31"},
                },
            }
        )
        assert PackageLockReader().parse(content) == {
            "zod": "3.24.4",
            "@prisma/client": "5.22.0",
        }

    def test_v1_dependencies(self):
        content = json.dumps({"lockfileVersion": 1, "dependencies": {"zod": {"version": "3.1.0"}}})
        assert PackageLockReader().parse(content) == {"zod": "3.1.0"}

    def test_n_entries_yield_n(self):
        packages = {f"node_modules/pkg-{i}": {"version": f"1.0.{i}"} for i in range(7)}
        assert len(PackageLockReader().parse(json.dumps({"packages": packages}))) == 7


# ── yarn.lock ────────────────────────────────────────────────────────────


class TestYarnLock:
    def test_parse_header_multiple_specifiers(self):
        assert parse_header('"zod@^3.22.0", zod@^3.23.0') == ["zod"]

    def test_parse_header_npm_indirection(self):
        assert parse_header('"@scope/pkg@npm:^1.0.0"') == ["@scope/pkg"]

    def test_parse_header_skips_patch_and_metadata(self):
        assert parse_header("__metadata") == []
        assert parse_header('"resolve@patch:resolve@^1.0.0#~builtin<compat/resolve>"') == []

    def test_extract_version_variants(self):
        assert extract_version('  version "3.24.4"') == "3.24.4"
        assert extract_version("  version: 3.24.4") == "3.24.4"

    def test_classic(self):
        content = """\
        # yarn lockfile v1


        "zod@^3.22.0", zod@^3.23.0:
          version "3.24.4"
          resolved "https://registry.yarnpkg.com/zod/-/zod-3.24.4.tgz"

        "@prisma/client@^5.0.0":
          version "5.22.0"
        """
        assert YarnLockReader().parse(textwrap.dedent(content)) == {
            "zod": "3.24.4",
            "@prisma/client": "5.22.0",
        }

    def test_berry(self):
        content = """\
        __metadata:
          version: 6
          cacheKey: 8

        "zod@npm:^3.22.0, zod@npm:^3.23.0":
          version: 3.24.4
          resolution: "zod@npm:3.24.4"
        """
        assert YarnLockReader().parse(textwrap.dedent(content)) == {"zod": "3.24.4"}


# ── pnpm-lock.yaml ───────────────────────────────────────────────────────


class TestPnpmLock:
    def test_v6_slash_prefix(self):
        content = """\
        lockfileVersion: '6.0'

        dependencies:
          zod:
            specifier: ^3.22.0
            version: 3.24.4

        packages:

          /zod@3.24.4:
            resolution: {integrity: sha512-abc}
            dev: false

          /@prisma/client@5.22.0(prisma@5.22.0):
            resolution: {integrity: sha512-def}
        """
        assert PnpmLockReader().parse(textwrap.dedent(content)) == {
            "zod": "3.24.4",
            "@prisma/client": "5.22.0",
        }

    def test_v9_quoted_and_snapshots_ignored(self):
        content = """\
        lockfileVersion: '9.0'

        packages:

          '@prisma/client@5.22.0':
            resolution: {integrity: sha512-def}

          zod@3.24.4:
            resolution: {integrity: sha512-abc}

        snapshots:

          zod@3.24.5: {}
        """
        assert PnpmLockReader().parse(textwrap.dedent(content)) == {
            "@prisma/client": "5.22.0",
            "zod": "3.24.4",
        }


# ── TOML locks and mix.lock ──────────────────────────────────────────────


class TestOtherLocks:
    def test_cargo_lock(self, tmp_path):
        _write(
            tmp_path,
            "Cargo.lock",
            """\
            version = 3

            [[package]]
            name = "serde"
            version = "1.0.197"

            [[package]]
            name = "tokio"
            version = "1.36.0"
            """,
        )
        _, versions = read_lock_versions("crates", tmp_path)
        assert versions == {"serde": "1.0.197", "tokio": "1.36.0"}

    def test_uv_lock_normalizes_names(self, tmp_path):
        _write(
            tmp_path,
            "uv.lock",
            """\
            [[package]]
            name = "Typing_Extensions"
            version = "4.10.0"
            """,
        )
        _, versions = read_lock_versions("pypi", tmp_path)
        assert versions == {"typing-extensions": "4.10.0"}

    def test_poetry_lock_used_without_uv(self, tmp_path):
        _write(tmp_path, "poetry.lock", '[[package]]\nname = "httpx"\nversion = "0.27.0"\n')
        filename, versions = read_lock_versions("pypi", tmp_path)
        assert filename == "poetry.lock"
        assert versions == {"httpx": "0.27.0"}

    def test_bad_toml(self, tmp_path):
        _write(tmp_path, "Cargo.lock", "[[package]\nname = ")
        assert read_lock_versions("crates", tmp_path) is None

    def test_mix_lock(self):
        content = textwrap.dedent(
            """\
            %{
              "phoenix": {:hex, :phoenix, "1.7.10", "abc", [:mix], [], "hexpm", "def"},
              "ecto": {:hex, :ecto, "3.11.1", "abc", [:mix], [], "hexpm", "def"},
              "local": {:git, "https://github.com/x/local.git", "abc", []},
            }
            """
        )
        assert MixLockReader().parse(content) == {"phoenix": "1.7.10", "ecto": "3.11.1"}

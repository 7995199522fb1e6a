"""Lock-file readers — auto-registered on import."""

from frameguide.engines.dependency_resolver.lockfiles import (
    bun_lock,  # noqa: F401
    mix_lock,  # noqa: F401
    package_lock,  # noqa: F401
    pnpm_lock,  # noqa: F401
    toml_lock,  # noqa: F401
    yarn_lock,  # noqa: F401
)

"""Manifest extractors — auto-registered on import."""

from devrecon.manifests.extractors import (
    cargo_toml,  # noqa: F401
    composer_json,  # noqa: F401
    package_json,  # noqa: F401
    pip_requirements,  # noqa: F401
    pipfile,  # noqa: F401
    pnpm_lock,  # noqa: F401
    pubspec_yaml,  # noqa: F401
    yarn_lock,  # noqa: F401
)

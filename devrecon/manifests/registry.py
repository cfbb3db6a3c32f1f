"""Extractor registry — one extraction rule per manifest format."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class ManifestExtractor(Protocol):
    """Interface that every manifest extractor must satisfy.

    ``extract`` returns ``{dependency name: raw version string}`` and raises
    :class:`~devrecon.exceptions.ManifestParseError` on malformed content.
    """

    manifest_type: str
    lockfile: bool

    def extract(self, content: str) -> dict[str, str]: ...


EXTRACTOR_REGISTRY: dict[str, ManifestExtractor] = {}


def register_extractor(extractor: ManifestExtractor) -> None:
    """Register an extractor instance by its manifest_type."""
    EXTRACTOR_REGISTRY[extractor.manifest_type] = extractor


def get_extractor(manifest_type: str) -> ManifestExtractor | None:
    return EXTRACTOR_REGISTRY.get(manifest_type)

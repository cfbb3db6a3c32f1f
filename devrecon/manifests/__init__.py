"""Manifest discovery — locate dependency manifests and extract declared versions."""

# Ensure extractors are registered before anything looks them up.
import devrecon.manifests.extractors  # noqa: F401
from devrecon.manifests.locator import (
    RECOGNIZED_MANIFESTS,
    locate_all,
    locate_manifests,
    primary_manifests,
)
from devrecon.manifests.models import Codebase, LocatedCodebase, Manifest
from devrecon.manifests.registry import EXTRACTOR_REGISTRY, get_extractor

__all__ = [
    "EXTRACTOR_REGISTRY",
    "RECOGNIZED_MANIFESTS",
    "Codebase",
    "LocatedCodebase",
    "Manifest",
    "get_extractor",
    "locate_all",
    "locate_manifests",
    "primary_manifests",
]

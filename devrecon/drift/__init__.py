"""Cross-codebase version drift detection."""

from devrecon.drift.models import (
    DriftReport,
    PackageDrift,
    Reason,
    TrackedPackage,
    Verdict,
    VersionEntry,
)
from devrecon.drift.reconciler import detect_drift, parse_tracked, reconcile

__all__ = [
    "DriftReport",
    "PackageDrift",
    "Reason",
    "TrackedPackage",
    "Verdict",
    "VersionEntry",
    "detect_drift",
    "parse_tracked",
    "reconcile",
]

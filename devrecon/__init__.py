"""devrecon: project reconnaissance and cross-codebase version drift detection."""

__version__ = "0.1.0"

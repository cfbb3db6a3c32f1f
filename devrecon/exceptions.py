"""Custom exceptions for devrecon."""


class ReconError(Exception):
    """Base exception for all devrecon errors."""


class RootUnreadableError(ReconError):
    """Raised when the project root cannot be read at all."""

    def __init__(self, root: str, reason: str):
        self.root = root
        self.reason = reason
        super().__init__(f"Cannot read project root '{root}': {reason}")


class ConfigError(ReconError):
    """Raised when devrecon.toml or a CLI override is invalid."""


class ManifestParseError(ReconError):
    """Raised by an extractor when a manifest is not valid for its format."""

    def __init__(self, manifest_type: str, message: str):
        self.manifest_type = manifest_type
        super().__init__(f"{manifest_type}: {message}")


class ExternalToolUnavailable(ReconError):
    """Raised when an external collaborator (tokei, tree, eza) cannot be used."""

    def __init__(self, tool: str, reason: str):
        self.tool = tool
        self.reason = reason
        super().__init__(f"{tool}: {reason}")

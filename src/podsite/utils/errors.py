"""Custom exceptions for podsite."""

from pathlib import Path


class PodsiteError(Exception):
    """Base exception for all podsite errors."""

    pass


class ConfigError(PodsiteError):
    """Configuration-related errors."""

    pass


class InvalidConfigError(ConfigError):
    """Invalid build settings."""

    pass


class ConfigParseError(ConfigError):
    """A metadata or config document could not be parsed.

    Attributes:
        path: Document that failed to parse.
    """

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot parse {path}: {reason}")


class TemplateError(PodsiteError):
    """Template-related errors."""

    pass


class TemplateNotFoundError(TemplateError):
    """A required template file is missing."""

    def __init__(self, kind: str, path: Path) -> None:
        self.kind = kind
        self.path = path
        super().__init__(f"Missing {kind} template: {path}")


class TemplateRenderError(TemplateError):
    """Rendering produced an invalid document."""

    pass


class CapabilityError(PodsiteError):
    """An external tool is unavailable or failed."""

    pass


class SecurityError(PodsiteError):
    """Output path escapes the output directory."""

    pass

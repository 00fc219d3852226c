"""
Exception hierarchy for Riviere.

All errors raised by the resolver, the config loader, the extraction rule
evaluator and the extraction service derive from RiviereError. The CLI is
the only place that catches them and turns them into JSON error envelopes.
"""

from __future__ import annotations

__all__ = [
    "RiviereError",
    "ResolutionError",
    "ConfigLoaderRequiredError",
    "MissingComponentRuleError",
    "ExtractionError",
    "ConfigurationError",
    "ConfigFileNotFoundError",
    "ModuleRefNotFoundError",
    "InvalidConfigFormatError",
    "ConfigSchemaValidationError",
    "PackageResolveError",
    "PackageConfigNotFoundError",
    "NoSourceFilesError",
]


class RiviereError(Exception):
    """Base exception for all Riviere errors."""


# =============================================================================
# Resolution Errors
# =============================================================================


class ResolutionError(RiviereError):
    """Raised when a module config cannot be resolved into a full module."""


class ConfigLoaderRequiredError(ResolutionError):
    """Raised when a module uses extends but no config loader was supplied."""

    def __init__(self, module_name: str):
        self.module_name = module_name
        super().__init__(
            f"Module '{module_name}' uses extends but no config loader was provided."
        )


class MissingComponentRuleError(ResolutionError):
    """Raised when a module without extends omits a component rule."""

    def __init__(self, module_name: str, rule_name: str):
        self.module_name = module_name
        self.rule_name = rule_name
        super().__init__(
            f"Module '{module_name}' is missing required rule '{rule_name}'. "
            "Either provide the rule or use extends to inherit from a base config."
        )


# =============================================================================
# Extraction Errors
# =============================================================================


class ExtractionError(RiviereError):
    """Raised when an extraction rule cannot produce a value for a node.

    The message is suffixed with the source location and the location is
    kept on the exception for structured reporting.
    """

    def __init__(self, message: str, file: str, line: int):
        self.location = {"file": file, "line": line}
        self.file = file
        self.line = line
        super().__init__(f"{message} at {file}:{line}")


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(RiviereError):
    """Base class for errors raised while loading extraction configs."""


class ConfigFileNotFoundError(ConfigurationError):
    """Raised when a config file does not exist."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Config file not found: {path}")


class ModuleRefNotFoundError(ConfigurationError):
    """Raised when a module $ref points at a missing file."""

    def __init__(self, ref: str, path: str):
        self.ref = ref
        self.path = path
        super().__init__(f"Module reference '{ref}' not found: {path}")


class InvalidConfigFormatError(ConfigurationError):
    """Raised when a config file is not parseable or has the wrong shape."""


class ConfigSchemaValidationError(ConfigurationError):
    """Raised when a config fails schema or semantic validation.

    Attributes:
        errors: One human-readable line per validation failure
    """

    def __init__(self, errors: list[str], source: str | None = None):
        self.errors = errors
        self.source = source
        prefix = f"Invalid extraction config {source}" if source else "Invalid extraction config"
        super().__init__(f"{prefix}:\n" + "\n".join(f"  {e}" for e in errors))


class PackageResolveError(ConfigurationError):
    """Raised when an extends package reference cannot be resolved."""

    def __init__(self, package_name: str):
        self.package_name = package_name
        super().__init__(
            f"Cannot resolve package '{package_name}'. "
            "Install the package or use a relative path."
        )


class PackageConfigNotFoundError(ConfigurationError):
    """Raised when a resolved package ships no default extraction config."""

    def __init__(self, package_name: str, location: str):
        self.package_name = package_name
        self.location = location
        super().__init__(
            f"Package '{package_name}' does not contain a default extraction config "
            f"(looked in {location})"
        )


# =============================================================================
# Service Errors
# =============================================================================


class NoSourceFilesError(RiviereError):
    """Raised when no module path pattern matches any source file."""

    def __init__(self, patterns: list[str]):
        self.patterns = patterns
        super().__init__(
            "No files matched extraction patterns: " + ", ".join(patterns)
        )

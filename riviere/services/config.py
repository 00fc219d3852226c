"""
Configuration loading for Riviere extraction configs.

Reads YAML or JSON extraction configs (``yaml.safe_load`` parses both),
expands module ``$ref`` entries, validates the result with the pydantic
models in config_models plus the semantic required-fields check, and
provides the ConfigLoader used to resolve ``extends`` sources.

Usage:
    from riviere.services.config import create_config_loader, load_extraction_config
    from riviere.services.resolution import resolve_config

    config = load_extraction_config("riviere.config.yaml")
    resolved = resolve_config(config, create_config_loader("."))
"""

from __future__ import annotations

import importlib.util
import json
import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from riviere.common.exceptions import (
    ConfigFileNotFoundError,
    ConfigSchemaValidationError,
    InvalidConfigFormatError,
    ModuleRefNotFoundError,
    PackageConfigNotFoundError,
    PackageResolveError,
    ResolutionError,
)
from riviere.common.types import ConfigLoader
from riviere.services.config_models import (
    COMPONENT_TYPES,
    DetectionRule,
    ExtractionConfig,
    Module,
)
from riviere.services.resolution import resolve_config

logger = logging.getLogger(__name__)

# Fields every detection rule of a built-in type must extract
REQUIRED_FIELDS: dict[str, list[str]] = {
    "api": ["apiType"],
    "event": ["eventName"],
    "eventHandler": ["subscribedEvents"],
    "domainOp": ["operationName"],
    "ui": ["route"],
    "useCase": [],
}

# Package references served by the config bundled with this package
BUNDLED_CONFIG_ALIASES = frozenset(
    {"@living-architecture/riviere-extract-conventions", "conventions"}
)

BUNDLED_CONFIG_PATH = Path(__file__).resolve().parent.parent / "data" / "default-extraction.config.yaml"

DEFAULT_CONFIG_NAMES = ("default-extraction.config.yaml", "default-extraction.config.json")

# Module name and path given to configs authored as top-level rules
EXTENDED_MODULE_NAME = "extended"
EXTENDED_MODULE_PATH = "**"


# =============================================================================
# Reading and $ref Expansion
# =============================================================================


def read_config_file(path: str | Path, source: str | None = None) -> Any:
    """
    Read and parse a YAML or JSON config file.

    Args:
        path: File to read
        source: Name reported in errors (defaults to ``path``)

    Returns:
        Parsed document

    Raises:
        ConfigFileNotFoundError: If the file does not exist
        InvalidConfigFormatError: If the file is not valid YAML/JSON
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise ConfigFileNotFoundError(str(file_path))

    with open(file_path, encoding="utf-8") as f:
        content = f.read()

    try:
        return yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise InvalidConfigFormatError(
            f"Invalid config file {source or file_path}: {e}"
        ) from e


def expand_module_refs(data: Any, config_dir: str | Path) -> Any:
    """
    Replace ``{$ref: path}`` module entries with the referenced module.

    Paths are relative to ``config_dir``. Data without a modules list is
    returned unchanged.

    Raises:
        ModuleRefNotFoundError: If a referenced file does not exist
    """
    if not isinstance(data, dict) or not isinstance(data.get("modules"), list):
        return data

    expanded: list[Any] = []
    for module in data["modules"]:
        if isinstance(module, dict) and isinstance(module.get("$ref"), str):
            ref = module["$ref"]
            ref_path = Path(config_dir) / ref
            if not ref_path.is_file():
                raise ModuleRefNotFoundError(ref, str(ref_path))
            logger.debug("Expanding module reference %s", ref)
            expanded.append(read_config_file(ref_path, ref))
        else:
            expanded.append(module)

    return {**data, "modules": expanded}


# =============================================================================
# Validation
# =============================================================================


def _format_loc(loc: tuple[int | str, ...]) -> str:
    parts = [str(p) for p in loc if not _is_union_tag(p)]
    return "/" + "/".join(parts) if parts else "/"


def _is_union_tag(part: int | str) -> bool:
    # Discriminated unions insert the variant tag into error locations
    return isinstance(part, str) and part.startswith(("function-", "literal[", "nullable["))


def format_validation_errors(error: ValidationError) -> list[str]:
    """Render pydantic errors as ``path: message`` lines."""
    return [f"{_format_loc(e['loc'])}: {e['msg']}" for e in error.errors()]


def validate_required_fields(config: ExtractionConfig) -> list[str]:
    """
    Check that detection rules extract every field their type requires.

    Returns:
        One ``path: message`` line per rule with missing fields
    """
    errors: list[str] = []
    for index, module in enumerate(config.modules):
        for component_type in COMPONENT_TYPES:
            rule = module.rule_for(component_type)
            if not isinstance(rule, DetectionRule):
                continue
            extracted = set(rule.extract or {})
            missing = [f for f in REQUIRED_FIELDS[component_type] if f not in extracted]
            if missing:
                errors.append(
                    f"/modules/{index}/{component_type}: Missing required extraction rules: "
                    f"{', '.join(missing)}. Add extraction rules to the 'extract' block or use "
                    f"'notUsed: true' if not extracting {component_type} components."
                )
    return errors


def parse_extraction_config(data: Any, source: str | None = None) -> ExtractionConfig:
    """
    Validate parsed config data.

    Args:
        data: Parsed document with module refs already expanded
        source: Name reported in errors

    Returns:
        Validated ExtractionConfig

    Raises:
        ConfigSchemaValidationError: On schema or required-field violations
    """
    try:
        config = ExtractionConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigSchemaValidationError(format_validation_errors(e), source) from e

    semantic_errors = validate_required_fields(config)
    if semantic_errors:
        raise ConfigSchemaValidationError(semantic_errors, source)
    return config


def load_extraction_config(path: str | Path) -> ExtractionConfig:
    """
    Load, expand and validate an extraction config file.

    Args:
        path: Path to a YAML or JSON extraction config

    Returns:
        Validated ExtractionConfig (not yet resolved)

    Raises:
        ConfigurationError: If the file is missing, malformed or invalid
    """
    config_path = Path(path)
    data = read_config_file(config_path)
    expanded = expand_module_refs(data, config_path.resolve().parent)
    config = parse_extraction_config(expanded, str(config_path))
    logger.info("Loaded extraction config %s (%d modules)", config_path, len(config.modules))
    return config


# =============================================================================
# Extends Loader
# =============================================================================


def _is_package_reference(source: str) -> bool:
    return not source.startswith((".", "/"))


def resolve_package_config(package_name: str) -> Path:
    """
    Locate the default extraction config shipped by a package.

    The bundled conventions aliases map to the config shipped with Riviere.
    Any other name is looked up as an installed Python package (dashes read
    as underscores) containing a ``default-extraction.config.yaml|json``.

    Raises:
        PackageResolveError: If the package is not installed
        PackageConfigNotFoundError: If the package ships no default config
    """
    if package_name in BUNDLED_CONFIG_ALIASES:
        return BUNDLED_CONFIG_PATH

    module_name = package_name.replace("-", "_")
    try:
        spec = importlib.util.find_spec(module_name)
    except (ImportError, ValueError) as e:
        raise PackageResolveError(package_name) from e
    if spec is None or not spec.submodule_search_locations:
        raise PackageResolveError(package_name)

    locations = [Path(p) for p in spec.submodule_search_locations]
    for location in locations:
        for name in DEFAULT_CONFIG_NAMES:
            candidate = location / name
            if candidate.is_file():
                return candidate

    raise PackageConfigNotFoundError(package_name, ", ".join(str(p) for p in locations))


def parse_module_source(data: Any, source: str) -> Module:
    """
    Turn a loaded extends source into a base module.

    A document with a ``modules`` list yields its first module, fully
    resolved. A document of top-level component rules yields a module in
    which every missing rule is ``notUsed``.

    Raises:
        ConfigSchemaValidationError: If the document is not a valid config
        InvalidConfigFormatError: If the document has neither shape
    """
    if isinstance(data, dict) and isinstance(data.get("modules"), list):
        config = parse_extraction_config(data, source)
        try:
            resolved = resolve_config(config)
        except ResolutionError as e:
            raise ConfigSchemaValidationError([str(e)], source) from e
        return resolved.modules[0]

    if isinstance(data, dict) and "modules" not in data:
        rules: dict[str, Any] = {
            component_type: data.get(component_type, {"notUsed": True})
            for component_type in COMPONENT_TYPES
        }
        if "customTypes" in data:
            rules["customTypes"] = data["customTypes"]
        try:
            return Module.model_validate(
                {"name": EXTENDED_MODULE_NAME, "path": EXTENDED_MODULE_PATH, **rules}
            )
        except ValidationError as e:
            raise ConfigSchemaValidationError(format_validation_errors(e), source) from e

    preview = json.dumps(data, indent=2, default=str)[:200]
    raise InvalidConfigFormatError(
        f"Invalid config format in '{source}'. "
        f"Expected a modules array or top-level component rules, got: {preview}"
    )


def create_config_loader(config_dir: str | Path) -> ConfigLoader:
    """
    Create a ConfigLoader resolving ``extends`` sources.

    Sources starting with '.' or '/' are paths relative to ``config_dir``;
    anything else is a package reference. Each source is loaded at most once
    per loader.

    Args:
        config_dir: Directory of the config that declares ``extends``

    Returns:
        Callable mapping a source to its base Module
    """
    base_dir = Path(config_dir)
    cache: dict[str, Module] = {}

    def load(source: str) -> Module:
        if source in cache:
            return cache[source]

        if _is_package_reference(source):
            path = resolve_package_config(source)
        else:
            path = base_dir / source

        logger.debug("Loading base config %s from %s", source, path)
        module = parse_module_source(read_config_file(path, source), source)
        cache[source] = module
        return module

    return load


__all__ = [
    "BUNDLED_CONFIG_ALIASES",
    "BUNDLED_CONFIG_PATH",
    "REQUIRED_FIELDS",
    "create_config_loader",
    "expand_module_refs",
    "format_validation_errors",
    "load_extraction_config",
    "parse_extraction_config",
    "parse_module_source",
    "read_config_file",
    "resolve_package_config",
    "validate_required_fields",
]

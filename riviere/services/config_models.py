"""
Pydantic models for Riviere configuration.

Extraction configs are authored as YAML or JSON. Every tagged union
(Predicate, ExtractionRule) is modelled as a set of single-key models where
the key is the tag, so an authored predicate looks like
``{hasDecorator: {name: Controller}}``. Field names are snake_case and the
authored camelCase keys are aliases.

Runtime settings use pydantic-settings for environment variable validation.
"""

from __future__ import annotations

import re
from typing import Annotated, Any, ClassVar, Literal, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    Tag,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

# Component types in resolution and extraction order
COMPONENT_TYPES: tuple[str, ...] = ("api", "useCase", "domainOp", "event", "eventHandler", "ui")

# Authored component type name -> model attribute
COMPONENT_FIELDS: dict[str, str] = {
    "api": "api",
    "useCase": "use_case",
    "domainOp": "domain_op",
    "event": "event",
    "eventHandler": "event_handler",
    "ui": "ui",
}

FindTarget = Literal["classes", "methods", "functions"]


# =============================================================================
# Environment Settings (from .env file)
# =============================================================================


class RiviereSettings(BaseSettings):
    """Runtime settings for the extraction service and CLI."""

    model_config = SettingsConfigDict(env_prefix="RIVIERE_", env_file=".env", extra="ignore")

    log_level: str = "WARNING"
    logs_dir: str = "logs"
    run_logging: bool = False
    follow_symlinks: bool = False
    exclude_dirs: list[str] = Field(default_factory=lambda: ["node_modules", ".git", "dist"])


# =============================================================================
# Base Model
# =============================================================================


class ConfigModel(BaseModel):
    """Base for all authored config shapes: strict keys, frozen after load."""

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)


class TaggedModel(ConfigModel):
    """Single-key variant of a tagged union. ``TAG`` is the authored key."""

    TAG: ClassVar[str] = ""


def _variant_tag(value: Any) -> str | None:
    """Return the tag of a tagged-union value, raw or already validated."""
    if isinstance(value, TaggedModel):
        return value.TAG
    if isinstance(value, dict) and len(value) == 1:
        return next(iter(value))
    return None


# =============================================================================
# Transform
# =============================================================================


class Transform(ConfigModel):
    """String normalizations applied to an extracted value."""

    strip_suffix: str | None = Field(default=None, alias="stripSuffix")
    strip_prefix: str | None = Field(default=None, alias="stripPrefix")
    to_lower_case: bool = Field(default=False, alias="toLowerCase")
    to_upper_case: bool = Field(default=False, alias="toUpperCase")
    kebab_to_pascal: bool = Field(default=False, alias="kebabToPascal")
    pascal_to_kebab: bool = Field(default=False, alias="pascalToKebab")


# =============================================================================
# Predicates
# =============================================================================


class HasDecoratorArgs(ConfigModel):
    name: str | list[str]
    from_: str | None = Field(default=None, alias="from", min_length=1)

    @property
    def names(self) -> list[str]:
        return [self.name] if isinstance(self.name, str) else list(self.name)


class HasDecoratorPredicate(TaggedModel):
    TAG: ClassVar[str] = "hasDecorator"
    has_decorator: HasDecoratorArgs = Field(alias="hasDecorator")


class TagArgs(ConfigModel):
    tag: str = Field(..., min_length=1)


class HasJSDocPredicate(TaggedModel):
    TAG: ClassVar[str] = "hasJSDoc"
    has_js_doc: TagArgs = Field(alias="hasJSDoc")


class NameArgs(ConfigModel):
    name: str = Field(..., min_length=1)


class ExtendsClassPredicate(TaggedModel):
    TAG: ClassVar[str] = "extendsClass"
    extends_class: NameArgs = Field(alias="extendsClass")


class ImplementsInterfacePredicate(TaggedModel):
    TAG: ClassVar[str] = "implementsInterface"
    implements_interface: NameArgs = Field(alias="implementsInterface")


class SuffixArgs(ConfigModel):
    suffix: str


class NameEndsWithPredicate(TaggedModel):
    TAG: ClassVar[str] = "nameEndsWith"
    name_ends_with: SuffixArgs = Field(alias="nameEndsWith")


class PatternArgs(ConfigModel):
    pattern: str

    @field_validator("pattern")
    @classmethod
    def pattern_compiles(cls, v: str) -> str:
        """Reject patterns that are not valid regular expressions."""
        try:
            re.compile(v)
        except re.error as e:
            raise ValueError(f"invalid regular expression: {e}") from e
        return v


class NameMatchesPredicate(TaggedModel):
    TAG: ClassVar[str] = "nameMatches"
    name_matches: PatternArgs = Field(alias="nameMatches")


class InClassWithPredicate(TaggedModel):
    TAG: ClassVar[str] = "inClassWith"
    in_class_with: Predicate = Field(alias="inClassWith")


class AndPredicate(TaggedModel):
    TAG: ClassVar[str] = "and"
    and_: list[Predicate] = Field(alias="and")


class OrPredicate(TaggedModel):
    TAG: ClassVar[str] = "or"
    or_: list[Predicate] = Field(alias="or")


Predicate = Annotated[
    Union[
        Annotated[HasDecoratorPredicate, Tag("hasDecorator")],
        Annotated[HasJSDocPredicate, Tag("hasJSDoc")],
        Annotated[ExtendsClassPredicate, Tag("extendsClass")],
        Annotated[ImplementsInterfacePredicate, Tag("implementsInterface")],
        Annotated[NameEndsWithPredicate, Tag("nameEndsWith")],
        Annotated[NameMatchesPredicate, Tag("nameMatches")],
        Annotated[InClassWithPredicate, Tag("inClassWith")],
        Annotated[AndPredicate, Tag("and")],
        Annotated[OrPredicate, Tag("or")],
    ],
    Discriminator(_variant_tag),
]


# =============================================================================
# Extraction Rules
# =============================================================================


class TransformOptions(ConfigModel):
    transform: Transform | None = None


class LiteralRule(TaggedModel):
    TAG: ClassVar[str] = "literal"
    literal: bool | int | float | str

    @field_validator("literal")
    @classmethod
    def literal_not_empty(cls, v: bool | int | float | str) -> bool | int | float | str:
        """Reject empty string literals."""
        if isinstance(v, str) and not v:
            raise ValueError("literal must not be an empty string")
        return v


class FromClassNameRule(TaggedModel):
    TAG: ClassVar[str] = "fromClassName"
    from_class_name: Literal[True] | TransformOptions = Field(alias="fromClassName")


class FromMethodNameRule(TaggedModel):
    TAG: ClassVar[str] = "fromMethodName"
    from_method_name: Literal[True] | TransformOptions = Field(alias="fromMethodName")


class FilePathOptions(ConfigModel):
    pattern: str | None = None
    capture: int = Field(default=1, ge=0)
    transform: Transform | None = None

    @field_validator("pattern")
    @classmethod
    def pattern_compiles(cls, v: str | None) -> str | None:
        """Reject patterns that are not valid regular expressions."""
        if v is not None:
            try:
                re.compile(v)
            except re.error as e:
                raise ValueError(f"invalid regular expression: {e}") from e
        return v


class FromFilePathRule(TaggedModel):
    TAG: ClassVar[str] = "fromFilePath"
    from_file_path: Literal[True] | FilePathOptions = Field(alias="fromFilePath")


class PropertyOptions(ConfigModel):
    path: str | None = Field(default=None, min_length=1)
    name: str | None = Field(default=None, min_length=1)
    kind: Literal["static", "instance"] | None = None
    transform: Transform | None = None

    @model_validator(mode="after")
    def path_or_name(self) -> PropertyOptions:
        """Exactly one of path or name identifies the property."""
        if (self.path is None) == (self.name is None):
            raise ValueError("fromProperty requires exactly one of 'path' or 'name'")
        return self

    @property
    def segments(self) -> list[str]:
        """Property name followed by object-literal keys to walk."""
        if self.path is not None:
            return self.path.split(".")
        return [self.name or ""]


class FromPropertyRule(TaggedModel):
    TAG: ClassVar[str] = "fromProperty"
    from_property: PropertyOptions = Field(alias="fromProperty")


class DecoratorArgOptions(ConfigModel):
    decorator_name: str | None = Field(default=None, alias="decoratorName", min_length=1)
    arg_index: int | None = Field(
        default=None, ge=0, validation_alias=AliasChoices("argIndex", "position", "arg_index")
    )
    name: str | None = Field(default=None, min_length=1)
    transform: Transform | None = None

    @model_validator(mode="after")
    def index_or_name(self) -> DecoratorArgOptions:
        """Exactly one of argIndex or name selects the argument."""
        if (self.arg_index is None) == (self.name is None):
            raise ValueError("fromDecoratorArg requires exactly one of 'argIndex' or 'name'")
        return self


class FromDecoratorArgRule(TaggedModel):
    TAG: ClassVar[str] = "fromDecoratorArg"
    from_decorator_arg: DecoratorArgOptions = Field(alias="fromDecoratorArg")


class DecoratorNameOptions(ConfigModel):
    mapping: dict[str, str] | None = None
    transform: Transform | None = None


class FromDecoratorNameRule(TaggedModel):
    TAG: ClassVar[str] = "fromDecoratorName"
    from_decorator_name: Literal[True] | DecoratorNameOptions = Field(alias="fromDecoratorName")


class GenericArgOptions(ConfigModel):
    position: int = Field(..., ge=0)
    interface: str | None = Field(default=None, min_length=1)
    transform: Transform | None = None


class FromGenericArgRule(TaggedModel):
    TAG: ClassVar[str] = "fromGenericArg"
    from_generic_arg: GenericArgOptions = Field(alias="fromGenericArg")


class FromMethodSignatureRule(TaggedModel):
    TAG: ClassVar[str] = "fromMethodSignature"
    from_method_signature: Literal[True] = Field(alias="fromMethodSignature")


class FromConstructorParamsRule(TaggedModel):
    TAG: ClassVar[str] = "fromConstructorParams"
    from_constructor_params: Literal[True] = Field(alias="fromConstructorParams")


class ParameterTypeOptions(ConfigModel):
    position: int = Field(..., ge=0)
    transform: Transform | None = None


class FromParameterTypeRule(TaggedModel):
    TAG: ClassVar[str] = "fromParameterType"
    from_parameter_type: ParameterTypeOptions = Field(alias="fromParameterType")


ExtractionRule = Annotated[
    Union[
        Annotated[LiteralRule, Tag("literal")],
        Annotated[FromClassNameRule, Tag("fromClassName")],
        Annotated[FromMethodNameRule, Tag("fromMethodName")],
        Annotated[FromFilePathRule, Tag("fromFilePath")],
        Annotated[FromPropertyRule, Tag("fromProperty")],
        Annotated[FromDecoratorArgRule, Tag("fromDecoratorArg")],
        Annotated[FromDecoratorNameRule, Tag("fromDecoratorName")],
        Annotated[FromGenericArgRule, Tag("fromGenericArg")],
        Annotated[FromMethodSignatureRule, Tag("fromMethodSignature")],
        Annotated[FromConstructorParamsRule, Tag("fromConstructorParams")],
        Annotated[FromParameterTypeRule, Tag("fromParameterType")],
    ],
    Discriminator(_variant_tag),
]


# =============================================================================
# Component Rules and Modules
# =============================================================================


class NotUsed(ConfigModel):
    """Marks a component type as not used by a module."""

    not_used: Literal[True] = Field(alias="notUsed")


class DetectionRule(ConfigModel):
    """Which declarations form a component and how to extract its fields."""

    find: FindTarget
    where: Predicate
    extract: dict[str, ExtractionRule] | None = None


ComponentRule = Union[NotUsed, DetectionRule]

CustomTypes = dict[str, DetectionRule]


class ModuleRef(ConfigModel):
    """Reference to a module defined in a separate file. Expanded on load."""

    ref: str = Field(..., alias="$ref", min_length=1)


class _ModuleRules(ConfigModel):
    def rule_for(self, component_type: str) -> ComponentRule | None:
        """Return the rule for an authored component type name."""
        return getattr(self, COMPONENT_FIELDS[component_type])


class ModuleConfig(_ModuleRules):
    """A module as authored. Rules are optional when ``extends`` is set."""

    name: str = Field(..., min_length=1)
    path: str = Field(..., min_length=1)
    extends: str | None = Field(default=None, min_length=1)
    api: ComponentRule | None = None
    use_case: ComponentRule | None = Field(default=None, alias="useCase")
    domain_op: ComponentRule | None = Field(default=None, alias="domainOp")
    event: ComponentRule | None = None
    event_handler: ComponentRule | None = Field(default=None, alias="eventHandler")
    ui: ComponentRule | None = None
    custom_types: CustomTypes | None = Field(default=None, alias="customTypes")


class Module(_ModuleRules):
    """A fully resolved module: every component rule is present."""

    name: str = Field(..., min_length=1)
    path: str = Field(..., min_length=1)
    api: ComponentRule
    use_case: ComponentRule = Field(alias="useCase")
    domain_op: ComponentRule = Field(alias="domainOp")
    event: ComponentRule
    event_handler: ComponentRule = Field(alias="eventHandler")
    ui: ComponentRule
    custom_types: CustomTypes | None = Field(default=None, alias="customTypes")

    def rule_for(self, component_type: str) -> ComponentRule:
        """Return the rule for an authored component type name."""
        return getattr(self, COMPONENT_FIELDS[component_type])


class ExtractionConfig(ConfigModel):
    """Extraction config as authored, after $ref expansion."""

    schema_: str | None = Field(default=None, alias="$schema")
    modules: list[ModuleConfig] = Field(..., min_length=1)


class ResolvedExtractionConfig(ConfigModel):
    """Extraction config with every module resolved."""

    schema_: str | None = Field(default=None, alias="$schema")
    modules: list[Module]


InClassWithPredicate.model_rebuild()
AndPredicate.model_rebuild()
OrPredicate.model_rebuild()
DetectionRule.model_rebuild()


__all__ = [
    "COMPONENT_FIELDS",
    "COMPONENT_TYPES",
    "AndPredicate",
    "ComponentRule",
    "CustomTypes",
    "DecoratorArgOptions",
    "DecoratorNameOptions",
    "DetectionRule",
    "ExtendsClassPredicate",
    "ExtractionConfig",
    "ExtractionRule",
    "FilePathOptions",
    "FindTarget",
    "FromClassNameRule",
    "FromConstructorParamsRule",
    "FromDecoratorArgRule",
    "FromDecoratorNameRule",
    "FromFilePathRule",
    "FromGenericArgRule",
    "FromMethodNameRule",
    "FromMethodSignatureRule",
    "FromParameterTypeRule",
    "FromPropertyRule",
    "GenericArgOptions",
    "HasDecoratorArgs",
    "HasDecoratorPredicate",
    "HasJSDocPredicate",
    "ImplementsInterfacePredicate",
    "InClassWithPredicate",
    "LiteralRule",
    "Module",
    "ModuleConfig",
    "ModuleRef",
    "NameEndsWithPredicate",
    "NameMatchesPredicate",
    "NotUsed",
    "OrPredicate",
    "ParameterTypeOptions",
    "Predicate",
    "PropertyOptions",
    "ResolvedExtractionConfig",
    "RiviereSettings",
    "Transform",
    "TransformOptions",
]

"""Compiled schema nodes.

A compiled schema is a graph of immutable nodes. Every node exposes the same
three members:

    validate(value) -> list[ErrorMessage]
    description -> str
    is_acceptable_type(value) -> bool

Validation never raises for document content; it returns the located
findings. Building a node with an inconsistent set of keywords raises
SchemaConfigurationError immediately.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Protocol

from schemakit.errors import SchemaConfigurationError
from schemakit.formats import get_format
from schemakit.messages import ErrorMessage, prefix_errors, single_error
from schemakit.simple_types import (
    SimpleType,
    json_equal,
    render_json,
    render_value,
    to_decimal,
)

_NUMERIC_TYPES = frozenset({SimpleType.NUMBER, SimpleType.INTEGER})


class SchemaRegistry(Protocol):
    """Anything that can resolve a location to a compiled schema."""

    def get_schema(self, location: str) -> JsonSchema: ...


@dataclass(frozen=True)
class SimpleTypeSchema:
    """A primitive type plus optional refinements.

    Refinements left as None are unset; a length of 0 is also treated as
    unset. Patterns are full-matched against the string value.

    Attributes:
        type: The primitive kind the value must have.
        pattern: Regex the whole string must match (string only).
        format: Named format (see schemakit.formats); unknown names are ignored.
        min_length: Minimum string length (string only).
        max_length: Maximum string length (string only).
        minimum: Inclusive lower bound (number/integer only).
        maximum: Inclusive upper bound (number/integer only).
        exclusive_minimum: Make the lower bound exclusive (number/integer only).
        exclusive_maximum: Make the upper bound exclusive (number/integer only).
        enumeration: Allowed values; each must itself be of `type`.
    """

    type: SimpleType = SimpleType.ANY
    pattern: re.Pattern[str] | None = None
    format: str | None = None
    min_length: int | None = None
    max_length: int | None = None
    minimum: Decimal | None = None
    maximum: Decimal | None = None
    exclusive_minimum: bool | None = None
    exclusive_maximum: bool | None = None
    enumeration: tuple[Any, ...] | None = None

    def __post_init__(self) -> None:
        # Normalize convenience inputs; the dataclass is frozen.
        if isinstance(self.type, str) and not isinstance(self.type, SimpleType):
            object.__setattr__(self, "type", SimpleType(self.type))
        if isinstance(self.pattern, str):
            object.__setattr__(self, "pattern", re.compile(self.pattern))
        for name in ("minimum", "maximum"):
            bound = getattr(self, name)
            if bound is not None:
                object.__setattr__(self, name, to_decimal(bound))
        if self.enumeration is not None:
            object.__setattr__(self, "enumeration", tuple(self.enumeration))
        self._check_invariants()

    def _check_invariants(self) -> None:
        if self.pattern is not None and self.type is not SimpleType.STRING:
            raise SchemaConfigurationError(
                "Regex patterns are only legal for type string", field="pattern"
            )

        checker = get_format(self.format)
        if checker is not None and not checker.is_compatible_type(self.type):
            raise SchemaConfigurationError(
                f"Format {self.format} is not valid for type {self.type.value}", field="format"
            )

        for name, value in (("minLength", self.min_length), ("maxLength", self.max_length)):
            if value is not None and self.type is not SimpleType.STRING:
                raise SchemaConfigurationError(
                    f"{name} can only be used for type: string", field=name
                )

        for name, value in (
            ("minimum", self.minimum),
            ("maximum", self.maximum),
            ("exclusiveMinimum", self.exclusive_minimum),
            ("exclusiveMaximum", self.exclusive_maximum),
        ):
            if value is not None and self.type not in _NUMERIC_TYPES:
                raise SchemaConfigurationError(
                    f"{name} can only be used for integer or number types", field=name
                )

        if self.enumeration is not None:
            if self.type in (SimpleType.NULL, SimpleType.ANY):
                raise SchemaConfigurationError(
                    "enumeration not allowed for null or any types", field="enumeration"
                )
            for value in self.enumeration:
                if not self.type.matches(value):
                    raise SchemaConfigurationError(
                        f"values in enumeration must be of type {self.type.value}",
                        field="enumeration",
                    )

    @property
    def description(self) -> str:
        return self.type.value

    def is_acceptable_type(self, value: Any) -> bool:
        return self.type.matches(value)

    def validate(self, value: Any) -> list[ErrorMessage]:
        if not self.type.matches(value):
            return single_error("", f"Invalid type: must be of type {self.type.value}")

        errors: list[ErrorMessage] = []
        self._validate_pattern(value, errors)
        self._validate_format(value, errors)
        self._validate_range(value, errors)
        self._validate_length(value, errors)
        self._validate_enumeration(value, errors)
        return errors

    def _validate_pattern(self, value: Any, errors: list[ErrorMessage]) -> None:
        if self.pattern is None:
            return
        if not self.pattern.fullmatch(value):
            errors.append(
                ErrorMessage(
                    "",
                    f"String value '{value}' does not match regex '{self.pattern.pattern}'",
                )
            )

    def _validate_format(self, value: Any, errors: list[ErrorMessage]) -> None:
        checker = get_format(self.format)
        if checker is not None and not checker.check(value):
            errors.append(
                ErrorMessage("", f"Value '{render_value(value)}' is not a valid {self.format}")
            )

    def _validate_range(self, value: Any, errors: list[ErrorMessage]) -> None:
        if self.minimum is None and self.maximum is None:
            return
        number = to_decimal(value)
        text = render_value(value)
        if not number.is_finite():
            errors.append(ErrorMessage("", f"Value '{text}' is not a finite number"))
            return

        if self.minimum is not None:
            if self.exclusive_minimum and number <= self.minimum:
                errors.append(
                    ErrorMessage(
                        "",
                        f"Value '{text}' must be greater than {self.minimum} "
                        "when exclusiveMinimum is true",
                    )
                )
            elif number < self.minimum:
                errors.append(
                    ErrorMessage("", f"Value '{text}' must be greater or equal to {self.minimum}")
                )

        if self.maximum is not None:
            if self.exclusive_maximum and number >= self.maximum:
                errors.append(
                    ErrorMessage(
                        "",
                        f"Value '{text}' must be less than {self.maximum} "
                        "when exclusiveMaximum is true",
                    )
                )
            elif number > self.maximum:
                errors.append(
                    ErrorMessage(
                        "", f"Value '{text}' must be less than or equal to {self.maximum}"
                    )
                )

    def _validate_length(self, value: Any, errors: list[ErrorMessage]) -> None:
        if self.min_length and len(value) < self.min_length:
            errors.append(
                ErrorMessage(
                    "", f"Value '{value}' must be greater or equal to {self.min_length} characters"
                )
            )
        if self.max_length and len(value) > self.max_length:
            errors.append(
                ErrorMessage(
                    "", f"Value '{value}' must be less or equal to {self.max_length} characters"
                )
            )

    def _validate_enumeration(self, value: Any, errors: list[ErrorMessage]) -> None:
        if self.enumeration is None:
            return
        if any(json_equal(value, allowed) for allowed in self.enumeration):
            return
        allowed = ", ".join(render_json(v) for v in self.enumeration)
        errors.append(ErrorMessage("", f"Value {render_json(value)} must be one of: [{allowed}]"))


@dataclass(frozen=True)
class AdditionalPropertiesPolicy:
    """Blanket rule for object keys that have no declared property."""

    allow: bool

    @property
    def description(self) -> str:
        return ""

    def is_acceptable_type(self, value: Any) -> bool:
        return True

    def validate(self, value: Any) -> list[ErrorMessage]:
        if self.allow:
            return []
        return single_error("", "Unexpected property")


ALLOW_ALL_ADDITIONAL_PROPERTIES = AdditionalPropertiesPolicy(allow=True)
FORBID_ANY_ADDITIONAL_PROPERTIES = AdditionalPropertiesPolicy(allow=False)


@dataclass(frozen=True)
class Property:
    """A declared object property.

    Attributes:
        name: Key in the object.
        nested_schema: Schema the value must satisfy (defaults to any).
        required: Whether the key must be present.
    """

    name: str
    nested_schema: JsonSchema = field(default_factory=SimpleTypeSchema)
    required: bool = False


@dataclass(frozen=True)
class ObjectSchema:
    """An object with declared properties and a rule for the rest."""

    properties: tuple[Property, ...] = ()
    additional_properties: JsonSchema = ALLOW_ALL_ADDITIONAL_PROPERTIES

    def __post_init__(self) -> None:
        object.__setattr__(self, "properties", tuple(self.properties))
        names = [p.name for p in self.properties]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise SchemaConfigurationError(
                f"Duplicate property declarations: {', '.join(duplicates)}", field="properties"
            )

    @property
    def description(self) -> str:
        return "object"

    def is_acceptable_type(self, value: Any) -> bool:
        return isinstance(value, dict)

    def validate(self, value: Any) -> list[ErrorMessage]:
        if not isinstance(value, dict):
            return single_error("", "Invalid type: must be an object")

        errors: list[ErrorMessage] = []
        declared: set[str] = set()

        for prop in self.properties:
            declared.add(prop.name)
            if prop.name not in value:
                if prop.required:
                    errors.append(
                        ErrorMessage(prop.name, f"Missing required property {prop.name}")
                    )
                continue
            errors.extend(prefix_errors(prop.name, prop.nested_schema.validate(value[prop.name])))

        for key, item in value.items():
            if key not in declared:
                errors.extend(prefix_errors(key, self.additional_properties.validate(item)))

        return errors


@dataclass(frozen=True)
class ArraySchema:
    """An array whose items all satisfy one schema.

    A min_items or max_items of 0 means unset.
    """

    items: JsonSchema = field(default_factory=SimpleTypeSchema)
    min_items: int = 0
    max_items: int = 0

    @property
    def description(self) -> str:
        return "array"

    def is_acceptable_type(self, value: Any) -> bool:
        return isinstance(value, list)

    def validate(self, value: Any) -> list[ErrorMessage]:
        if not isinstance(value, list):
            return single_error("", "Invalid type: must be an array")

        errors: list[ErrorMessage] = []
        size = len(value)
        if self.max_items and size > self.max_items:
            errors.append(
                ErrorMessage(
                    "",
                    f"Current array size of {size} is greater than allowed "
                    f"maximum array size of {self.max_items}",
                )
            )
        if self.min_items and size < self.min_items:
            errors.append(
                ErrorMessage(
                    "",
                    f"Current array size of {size} is less than allowed "
                    f"minimum array size of {self.min_items}",
                )
            )

        for index, item in enumerate(value):
            errors.extend(prefix_errors(f"[{index}]", self.items.validate(item)))
        return errors


@dataclass(frozen=True)
class UnionSchema:
    """A value must satisfy at least one of several schemas.

    When every branch fails, the errors of the branch with the fewest
    findings are reported; the first declared branch wins a tie.
    """

    nested: tuple[JsonSchema, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "nested", tuple(self.nested))
        if not self.nested:
            raise SchemaConfigurationError("A union needs at least one nested schema", field="type")

    @property
    def description(self) -> str:
        return "union"

    def is_acceptable_type(self, value: Any) -> bool:
        return any(schema.is_acceptable_type(value) for schema in self.nested)

    def validate(self, value: Any) -> list[ErrorMessage]:
        if not self.is_acceptable_type(value):
            # dict.fromkeys keeps first-seen order while dropping repeats
            descriptions = dict.fromkeys(f'"{schema.description}"' for schema in self.nested)
            return single_error(
                "", f"Invalid type: must be one of: [{', '.join(descriptions)}]"
            )

        fewest: list[ErrorMessage] | None = None
        for schema in self.nested:
            errors = schema.validate(value)
            if fewest is None or len(errors) < len(fewest):
                fewest = errors
        return fewest or []


@dataclass(frozen=True)
class SchemaReference:
    """Indirection to a schema registered under another location.

    The target is looked up through the registry on every call, never
    captured, so forward and cyclic references resolve once the whole
    batch they belong to is registered.
    """

    registry: SchemaRegistry = field(compare=False, repr=False)
    location: str

    def resolve(self) -> JsonSchema:
        return self.registry.get_schema(self.location)

    @property
    def description(self) -> str:
        return self.resolve().description

    def is_acceptable_type(self, value: Any) -> bool:
        return self.resolve().is_acceptable_type(value)

    def validate(self, value: Any) -> list[ErrorMessage]:
        return self.resolve().validate(value)


JsonSchema = (
    SimpleTypeSchema
    | ObjectSchema
    | ArraySchema
    | UnionSchema
    | SchemaReference
    | AdditionalPropertiesPolicy
)

"""Response validation against a form's declared input schema.

Only a small JSON-Schema subset is supported: an object whose properties are
strings, numbers, integers or booleans, each optionally restricted by an
``enum``, plus a ``required`` list and an ``additionalProperties`` flag.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

STRING = "string"
NUMBER = "number"
INTEGER = "integer"
BOOLEAN = "boolean"

PROPERTY_KINDS = (STRING, NUMBER, INTEGER, BOOLEAN)


class SchemaDefinitionError(ValueError):
    """Raised when a stored schema uses something outside the supported subset."""


class ResponseValidationError(ValueError):
    """All violations found while validating one response."""

    def __init__(self, errors: List[str]) -> None:
        self.errors = list(errors)
        super().__init__("Validation failed: " + "; ".join(self.errors))


def _is_kind(kind: str, value: Any) -> bool:
    # bool is a subclass of int and must not pass as a number.
    if kind == STRING:
        return isinstance(value, str)
    if kind == BOOLEAN:
        return isinstance(value, bool)
    if isinstance(value, bool):
        return False
    if kind == NUMBER:
        return isinstance(value, (int, float))
    if kind == INTEGER:
        return isinstance(value, int) or (isinstance(value, float) and value.is_integer())
    return False


@dataclass(frozen=True)
class PropertySpec:
    name: str
    kind: str
    enum: Optional[Tuple[Any, ...]] = None

    @classmethod
    def from_dict(cls, name: str, definition: Any) -> "PropertySpec":
        if not isinstance(definition, Mapping):
            raise SchemaDefinitionError(f"Property '{name}' must be an object")
        kind = definition.get("type")
        if kind not in PROPERTY_KINDS:
            raise SchemaDefinitionError(
                f"Property '{name}' has unsupported type {kind!r}; "
                f"expected one of: {', '.join(PROPERTY_KINDS)}"
            )
        enum = definition.get("enum")
        if enum is not None:
            if not isinstance(enum, list) or not enum:
                raise SchemaDefinitionError(f"Property '{name}' enum must be a non-empty list")
            enum = tuple(enum)
        return cls(name=name, kind=kind, enum=enum)

    def check(self, value: Any) -> Optional[str]:
        """Return a violation message for ``value`` or ``None``."""

        if not _is_kind(self.kind, value):
            return f"{self.name} must be {self.kind}"
        if self.enum is not None and value not in self.enum:
            allowed = ", ".join(str(option) for option in self.enum)
            return f"{self.name} must be equal to one of the allowed values: {allowed}"
        return None


@dataclass(frozen=True)
class FormSchema:
    properties: Dict[str, PropertySpec] = field(default_factory=dict)
    required: Tuple[str, ...] = ()
    additional_properties: bool = True

    @classmethod
    def from_dict(cls, schema: Any) -> "FormSchema":
        if not isinstance(schema, Mapping):
            raise SchemaDefinitionError("Schema must be an object")
        schema_type = schema.get("type", "object")
        if schema_type != "object":
            raise SchemaDefinitionError("Schema type must be 'object'")

        raw_properties = schema.get("properties") or {}
        if not isinstance(raw_properties, Mapping):
            raise SchemaDefinitionError("Schema properties must be an object")
        properties = {
            name: PropertySpec.from_dict(name, definition)
            for name, definition in raw_properties.items()
        }

        raw_required = schema.get("required") or []
        if not isinstance(raw_required, list) or not all(
            isinstance(name, str) for name in raw_required
        ):
            raise SchemaDefinitionError("Schema required must be a list of property names")

        additional = schema.get("additionalProperties", True)
        return cls(
            properties=properties,
            required=tuple(dict.fromkeys(raw_required)),
            additional_properties=additional is not False,
        )

    def errors_for(self, response: Any) -> List[str]:
        if not isinstance(response, Mapping):
            return ["response must be an object"]

        errors: List[str] = []
        for name in self.required:
            if name not in response:
                errors.append(f"must have required property '{name}'")

        for name, value in response.items():
            prop = self.properties.get(name)
            if prop is None:
                if not self.additional_properties:
                    errors.append(f"{name} is not an allowed property")
                continue
            problem = prop.check(value)
            if problem:
                errors.append(problem)
        return errors


def validate_response(schema: Any, response: Any) -> None:
    """Validate ``response`` against ``schema``.

    Raises ``ResponseValidationError`` carrying every violation; a response
    that is not an object fails before any property is looked at.
    """

    if isinstance(schema, FormSchema):
        parsed = schema
    else:
        parsed = FormSchema.from_dict(schema)
    errors = parsed.errors_for(response)
    if errors:
        raise ResponseValidationError(errors)

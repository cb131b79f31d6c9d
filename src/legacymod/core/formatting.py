"""Hand-built JSON arrays and objects for plugin responses."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass

from .escaping import quote


@dataclass(frozen=True)
class Raw:
    """A member whose value is already valid JSON text (booleans, numbers, arrays)."""

    name: str
    literal: str


@dataclass(frozen=True)
class StringLiteral:
    """A member whose value is plain text to be escaped and quoted."""

    name: str
    text: str


@dataclass(frozen=True)
class VariableRef:
    """A member whose value is looked up by name in the invocation variables."""

    name: str


type ResponseField = Raw | StringLiteral | VariableRef
type FieldSpec = ResponseField | str


def parse_field(text: str) -> ResponseField:
    """Interpret a compact field description.

    ``name=value`` is a string literal, ``name:value`` a raw JSON literal and a
    bare ``name`` a variable reference. When both separators are present the
    one appearing first decides, so ``msg=a:b`` stays a string literal.
    """
    equals = text.find("=")
    colon = text.find(":")
    if equals != -1 and (colon == -1 or equals < colon):
        name, value = text[:equals], text[equals + 1 :]
        if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
            value = value[1:-1]
        return StringLiteral(name, value)
    if colon != -1:
        return Raw(text[:colon], text[colon + 1 :])
    return VariableRef(text)


def format_array(items: Iterable[str]) -> str:
    """Render *items* as a JSON array of strings."""
    return "[" + ", ".join(quote(item) for item in items) + "]"


def format_object(
    fields: Sequence[FieldSpec],
    extra_var_names: Sequence[str] = (),
    variables: Mapping[str, str] | None = None,
) -> str:
    """Render *fields* followed by *extra_var_names* as a flat JSON object."""
    lookup: Mapping[str, str] = variables if variables is not None else {}
    members: list[str] = []
    resolved = [_coerce(field) for field in fields]
    resolved.extend(VariableRef(name) for name in extra_var_names)
    for field in resolved:
        members.append(f"{quote(field.name)}: {_render_value(field, lookup)}")
    return "{" + ", ".join(members) + "}"


def _coerce(field: FieldSpec) -> ResponseField:
    if isinstance(field, str):
        return parse_field(field)
    return field


def _render_value(field: ResponseField, variables: Mapping[str, str]) -> str:
    match field:
        case Raw(literal=literal):
            return literal
        case StringLiteral(text=text):
            return quote(text)
        case VariableRef(name=name):
            return quote(variables.get(name, ""))


__all__ = [
    "FieldSpec",
    "Raw",
    "ResponseField",
    "StringLiteral",
    "VariableRef",
    "format_array",
    "format_object",
    "parse_field",
]

"""Tests for the hand-built JSON array and object formatter."""

from __future__ import annotations

import json

import pytest

from legacymod.core.formatting import (
    Raw,
    StringLiteral,
    VariableRef,
    format_array,
    format_object,
    parse_field,
)


def test_empty_containers() -> None:
    """Empty inputs render as the empty JSON containers."""
    assert format_object([]) == "{}"
    assert format_array([]) == "[]"


def test_format_array_escapes_items() -> None:
    """Array members are quoted, escaped and comma-space separated."""
    rendered = format_array(["a", 'b"c', "d/e"])

    assert rendered == '["a", "b\\"c", "d\\/e"]'
    assert json.loads(rendered) == ["a", 'b"c', "d/e"]


def test_format_object_matches_protocol_example() -> None:
    """Raw, literal and variable fields produce the documented response."""
    rendered = format_object(
        ["failed:false", 'msg="File altered"', "string1"],
        variables={"string1": "hello"},
    )

    assert rendered == '{"failed": false, "msg": "File altered", "string1": "hello"}'


def test_format_object_accepts_field_objects() -> None:
    """Field objects and compact strings are interchangeable."""
    rendered = format_object(
        [Raw("rc", "0"), StringLiteral("msg", "ok"), VariableRef("path")],
        variables={"path": "/tmp/a b"},
    )

    assert json.loads(rendered) == {"rc": 0, "msg": "ok", "path": "/tmp/a b"}


def test_missing_variable_resolves_to_empty_string() -> None:
    """Unknown variable names produce an empty string, not an error."""
    assert format_object(["nothing"]) == '{"nothing": ""}'


def test_extra_var_names_follow_explicit_fields() -> None:
    """Extra variable names are appended after the explicit members."""
    rendered = format_object(
        ["failed:false"],
        ["stdout", "stderr"],
        variables={"stdout": "line one\nline two\n", "stderr": "warn"},
    )

    assert list(json.loads(rendered)) == ["failed", "stdout", "stderr"]
    assert json.loads(rendered)["stdout"] == "line one\nline two\n"


def test_raw_values_support_nested_containers() -> None:
    """Raw members carry arrays and objects verbatim."""
    items = format_array(["x", "y"])
    rendered = format_object([Raw("items", items), Raw("meta", '{"k": 1}')])

    assert json.loads(rendered) == {"items": ["x", "y"], "meta": {"k": 1}}


def test_keys_are_escaped() -> None:
    """Member names are escaped like values."""
    rendered = format_object([StringLiteral('we"ird', "v")])

    assert json.loads(rendered) == {'we"ird': "v"}


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("msg=hello", StringLiteral("msg", "hello")),
        ('msg="quoted text"', StringLiteral("msg", "quoted text")),
        ("msg=a:b", StringLiteral("msg", "a:b")),
        ("url=http://host:80/", StringLiteral("url", "http://host:80/")),
        ("failed:true", Raw("failed", "true")),
        ("data:{\"a\": \"b=c\"}", Raw("data", '{"a": "b=c"}')),
        ("name", VariableRef("name")),
        ("empty=", StringLiteral("empty", "")),
    ],
)
def test_parse_field_precedence(text: str, expected: object) -> None:
    """The separator that appears first decides the field form."""
    assert parse_field(text) == expected

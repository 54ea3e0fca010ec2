# pylint: disable=missing-module-docstring,missing-function-docstring

import pytest

from analytics.attributes import Attribute, AttributeValue, ValueKind, attributes_from


# ---------------------------------------------------------------------
# AttributeValue constructors
# ---------------------------------------------------------------------

def test_numeric_keeps_int_text():
    value = AttributeValue.numeric(42)

    assert value.kind is ValueKind.NUMERIC
    assert value.text == "42"
    assert value.is_numeric


def test_numeric_float_uses_round_tripping_repr():
    assert AttributeValue.numeric(0.1).text == "0.1"
    assert AttributeValue.numeric(2.5).text == "2.5"


def test_numeric_accepts_preformatted_text():
    assert AttributeValue.numeric("1e3").text == "1e3"


def test_numeric_rejects_bool():
    with pytest.raises(TypeError):
        AttributeValue.numeric(True)


def test_text_value_is_not_numeric():
    value = AttributeValue.of_text("12")

    assert value.kind is ValueKind.TEXT
    assert not value.is_numeric


# ---------------------------------------------------------------------
# Attribute.of inference
# ---------------------------------------------------------------------

def test_of_infers_kind_from_python_value():
    assert Attribute.of("n", 3).value.kind is ValueKind.NUMERIC
    assert Attribute.of("f", 1.5).value.kind is ValueKind.NUMERIC
    assert Attribute.of("s", "abc").value.kind is ValueKind.TEXT


def test_of_bool_is_text():
    attr = Attribute.of("flag", True)

    assert attr.value == AttributeValue.of_text("true")


def test_of_passes_attribute_value_through():
    value = AttributeValue.numeric("7")

    assert Attribute.of("x", value).value is value


# ---------------------------------------------------------------------
# attributes_from
# ---------------------------------------------------------------------

def test_attributes_from_mapping_preserves_order():
    attrs = attributes_from({"b": 1, "a": "x"})

    assert [a.name for a in attrs] == ["b", "a"]


def test_attributes_from_pairs_keeps_duplicates():
    attrs = attributes_from([("tag", "x"), ("tag", "y")])

    assert [a.value.text for a in attrs] == ["x", "y"]

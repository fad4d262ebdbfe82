import pytest

from lift_kiosk.errors import ParseError
from lift_kiosk.normalization import (
    FieldMapping,
    PayloadNormalizer,
    c_to_f,
    compress_range,
    format_temperature,
    snow_string,
    temperature_to_f,
)


def test_celsius_conversion():
    assert c_to_f(0) == pytest.approx(32.0)
    assert c_to_f(-40) == pytest.approx(-40.0)
    assert c_to_f(None) is None


def test_temperature_unit_codes():
    assert temperature_to_f(0, "wmoUnit:degC") == pytest.approx(32.0)
    assert temperature_to_f(20.0, "wmoUnit:degF") == pytest.approx(20.0)
    # Anything not explicitly Fahrenheit is treated as Celsius.
    assert temperature_to_f(10, None) == pytest.approx(50.0)
    assert temperature_to_f(None, "wmoUnit:degC") is None


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, "--"),
        (20.0, "20"),
        (20.25, "20.2"),
        (32.06, "32.1"),
        (0.0, "0"),
        (99.4, "99.4"),
        (99.96, "100"),
        (104.3, "104"),
        (-3.6, "-4"),
        (-12.2, "-12"),
    ],
)
def test_format_temperature(value, expected):
    assert format_temperature(value) == expected


@pytest.mark.parametrize(
    "value, expected",
    [(None, "--"), ("3-5", "3+"), ("3", "3"), ("0", "0"), ("10-14", "10+")],
)
def test_compress_range(value, expected):
    assert compress_range(value) == expected


def test_field_mapping_walks_nested_payloads():
    payload = {"a": [{"b": "1"}, {"b": "2"}]}

    assert FieldMapping(("a", 1, "b")).extract(payload) == "2"
    assert FieldMapping(("a", 5, "b")).extract(payload) is None
    assert FieldMapping(("missing", "b")).extract(payload) is None

    with pytest.raises(ParseError):
        FieldMapping(("a", "b")).extract(payload)


def test_normalizer_isolates_field_failures():
    normalizer = PayloadNormalizer(
        {
            "good": FieldMapping(("ok", "Inches"), converter=snow_string),
            "wrong_shape": FieldMapping(("bad", 0)),
            "nested_object": FieldMapping(("ok",), converter=snow_string),
        }
    )

    values = normalizer.normalize({"ok": {"Inches": 4}, "bad": {"not": "a list"}}, source="test")

    assert values == {"good": "4", "wrong_shape": None, "nested_object": None}

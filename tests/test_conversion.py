import math

import pytest

from protoc_scope.conversion import to_double, to_int, to_number
from protoc_scope.errors import ValueConverterError


class TestToDouble:
    def test_plain_and_exponent(self):
        assert to_double("1.5") == 1.5
        assert to_double("2e3") == 2000.0
        assert to_double(".25") == 0.25

    def test_special_values(self):
        assert to_double("inf") == math.inf
        assert to_double("-inf") == -math.inf
        assert math.isnan(to_double("nan"))

    @pytest.mark.parametrize("text", ["", None, "   "])
    def test_empty_input(self, text):
        with pytest.raises(ValueConverterError) as exc:
            to_double(text)
        assert str(exc.value) == "Couldn't convert empty string to double."

    def test_non_number(self):
        with pytest.raises(ValueConverterError) as exc:
            to_double("abc")
        assert str(exc.value) == "Couldn't convert 'abc' to double."
        assert isinstance(exc.value.__cause__, ValueError)


class TestToInt:
    def test_decimal_hex_octal(self):
        assert to_int("42") == 42
        assert to_int("0x1F") == 31
        assert to_int("017") == 15
        assert to_int("0") == 0

    def test_signed(self):
        assert to_int("-7") == -7
        assert to_int("+0x10") == 16

    def test_empty_input(self):
        with pytest.raises(ValueConverterError) as exc:
            to_int("")
        assert str(exc.value) == "Couldn't convert empty string to int."

    def test_bad_literal(self):
        with pytest.raises(ValueConverterError) as exc:
            to_int("1.5")
        assert str(exc.value) == "Couldn't convert '1.5' to int."

    def test_is_a_value_error(self):
        with pytest.raises(ValueError):
            to_int("zz")


class TestToNumber:
    def test_prefers_int(self):
        assert to_number("10") == 10
        assert isinstance(to_number("10"), int)

    def test_falls_back_to_float(self):
        assert to_number("1e2") == 100.0

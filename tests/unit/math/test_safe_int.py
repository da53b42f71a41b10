"""Tests for SafeInt checked arithmetic."""

import pytest

from dex.safe_int import (
    DivisionByZero,
    S,
    SafeInt,
    SafeIntError,
    Underflow,
)


class TestSafeIntConstruction:
    """Tests for SafeInt construction."""

    def test_from_int(self):
        assert SafeInt(42).value == 42

    def test_from_safeint(self):
        assert SafeInt(SafeInt(42)).value == 42

    def test_invalid_types_rejected(self):
        """Floats, strings and bools are not amounts."""
        with pytest.raises(TypeError):
            SafeInt("42")  # type: ignore[arg-type]
        with pytest.raises(TypeError):
            SafeInt(3.14)  # type: ignore[arg-type]
        with pytest.raises(TypeError):
            SafeInt(True)

    def test_alias_s(self):
        assert S is SafeInt


class TestSafeIntArithmetic:
    """Tests for checked operators."""

    def test_add_and_radd(self):
        assert (S(2) + 3).value == 5
        assert (3 + S(2)).value == 5

    def test_sub(self):
        assert (S(5) - S(3)).value == 2
        assert (S(5) - 5).value == 0

    def test_sub_underflow(self):
        with pytest.raises(Underflow):
            S(3) - 5

    def test_mul_and_rmul(self):
        assert (S(6) * 7).value == 42
        assert (7 * S(6)).value == 42

    def test_floordiv_rounds_down(self):
        assert (S(200) * 997 // 1997).value == 99

    def test_division_by_zero(self):
        with pytest.raises(DivisionByZero):
            S(1) // 0

    def test_errors_are_arithmetic_errors(self):
        """Accounting bugs are not exchange rejections."""
        assert issubclass(Underflow, SafeIntError)
        assert issubclass(SafeIntError, ArithmeticError)

    def test_comparisons(self):
        assert S(1) < 2
        assert S(2) <= S(2)
        assert S(3) > S(2)
        assert S(3) >= 3
        assert S(3) == 3
        assert S(3) == S(3)
        assert S(3) != S(4)

    def test_bool_and_int(self):
        assert not S(0)
        assert S(1)
        assert int(S(9)) == 9

    def test_hashable(self):
        assert len({S(1), S(1), S(2)}) == 2


"""Tests for the Adams coefficient tables.

Tests cover:
- Shape and normalization of the literal tables (12, 16, 20)
- Exact agreement between the literal tables and the rational derivation
- Known low-order Adams weights
- Table lookup and validation errors
"""

import math
from fractions import Fraction

import pytest

from abmjax.integrators import (
    ADAMS_12,
    ADAMS_16,
    ADAMS_20,
    SUPPORTED_ORDERS,
    CoefficientTable,
    adams_weights,
    derive_coefficient_table,
    get_coefficient_table,
    make_coefficient_table,
)

_LITERAL_TABLES = [(12, ADAMS_12), (16, ADAMS_16), (20, ADAMS_20)]


# ──────────────────────────────────────────────
# Literal tables
# ──────────────────────────────────────────────

class TestLiteralTables:
    @pytest.mark.parametrize("order,table", _LITERAL_TABLES)
    def test_lengths(self, order, table):
        """Both weight sets have one weight per step."""
        assert table.order == order
        assert len(table.bashforth) == order
        assert len(table.moulton) == order

    @pytest.mark.parametrize("order,table", _LITERAL_TABLES)
    def test_bashforth_normalized(self, order, table):
        """divisor * sum(bashforth) == 1, so constant slopes integrate exactly."""
        assert math.fsum(table.bashforth) * table.divisor == pytest.approx(1.0, abs=1e-9)

    @pytest.mark.parametrize("order,table", _LITERAL_TABLES)
    def test_moulton_normalized(self, order, table):
        """divisor * sum(moulton) == 1."""
        assert math.fsum(table.moulton) * table.divisor == pytest.approx(1.0, abs=1e-9)

    @pytest.mark.parametrize("order,table", _LITERAL_TABLES)
    def test_first_moulton_matches_last_bashforth(self, order, table):
        """The implicit weight equals minus the oldest explicit weight."""
        assert table.moulton[0] == -table.bashforth[-1]

    def test_divisor_literals(self):
        assert ADAMS_12.divisor == 1.0 / 958003200.0
        assert ADAMS_16.divisor == 1.0 / 62768369664000.0
        assert ADAMS_20.divisor == 1.0 / 102181884343418880000.0

    def test_first_weights(self):
        assert ADAMS_12.bashforth[0] == 4527766399.0
        assert ADAMS_16.moulton[-1] == 240208245823.0
        assert ADAMS_20.bashforth[0] == 691668239157222107697.0


# ──────────────────────────────────────────────
# Exact derivation
# ──────────────────────────────────────────────

class TestAdamsWeights:
    def test_order_two(self):
        """Two-step Adams-Bashforth and trapezoidal Adams-Moulton."""
        bashforth, moulton = adams_weights(2)
        assert bashforth == (Fraction(3, 2), Fraction(-1, 2))
        assert moulton == (Fraction(1, 2), Fraction(1, 2))

    def test_order_four(self):
        """Classic AB4 / AM3 weights over 24."""
        bashforth, moulton = adams_weights(4)
        assert bashforth == tuple(Fraction(n, 24) for n in (55, -59, 37, -9))
        assert moulton == tuple(Fraction(n, 24) for n in (9, 19, -5, 1))

    @pytest.mark.parametrize("order", [2, 3, 5, 8, 12, 20])
    def test_weights_sum_to_one(self, order):
        bashforth, moulton = adams_weights(order)
        assert sum(bashforth) == 1
        assert sum(moulton) == 1

    @pytest.mark.parametrize("order", [0, 1, -3])
    def test_invalid_order(self, order):
        with pytest.raises(ValueError, match="at least 2"):
            adams_weights(order)


class TestDeriveCoefficientTable:
    @pytest.mark.parametrize("order,table", _LITERAL_TABLES)
    def test_reproduces_literal_tables(self, order, table):
        """The rational derivation reproduces the literal doubles exactly."""
        assert derive_coefficient_table(order) == table

    @pytest.mark.parametrize(
        "order,denominator,table",
        [
            (12, 958003200, ADAMS_12),
            (16, 62768369664000, ADAMS_16),
            (20, 102181884343418880000, ADAMS_20),
        ],
    )
    def test_reproduces_literal_tables_with_explicit_denominator(self, order, denominator, table):
        assert derive_coefficient_table(order, denominator=denominator) == table

    def test_order_four_integers(self):
        table = derive_coefficient_table(4)
        assert table.bashforth == (55.0, -59.0, 37.0, -9.0)
        assert table.moulton == (9.0, 19.0, -5.0, 1.0)
        assert table.divisor == 1.0 / 24.0

    def test_scaled_denominator(self):
        """Any multiple of the least common denominator is accepted."""
        table = derive_coefficient_table(4, denominator=48)
        assert table.bashforth == (110.0, -118.0, 74.0, -18.0)
        assert table.divisor == 1.0 / 48.0

    def test_bad_denominator(self):
        with pytest.raises(ValueError, match="not a common denominator"):
            derive_coefficient_table(4, denominator=7)


# ──────────────────────────────────────────────
# Lookup and construction
# ──────────────────────────────────────────────

class TestLookup:
    def test_supported_orders(self):
        assert SUPPORTED_ORDERS == (12, 16, 20)

    @pytest.mark.parametrize("order,table", _LITERAL_TABLES)
    def test_get_coefficient_table(self, order, table):
        assert get_coefficient_table(order) is table

    def test_unsupported_order(self):
        with pytest.raises(ValueError, match="No literal Adams table for order 4"):
            get_coefficient_table(4)


class TestMakeCoefficientTable:
    def test_builds_table(self):
        table = make_coefficient_table([3, -1], [1, 1], 0.5)
        assert isinstance(table, CoefficientTable)
        assert table.order == 2
        assert table.bashforth == (3.0, -1.0)
        assert table.moulton == (1.0, 1.0)
        assert table.divisor == 0.5

    def test_length_mismatch(self):
        with pytest.raises(ValueError, match="same length"):
            make_coefficient_table([3.0, -1.0], [1.0, 1.0, 0.0], 0.5)

    def test_too_short(self):
        with pytest.raises(ValueError, match="at least 2"):
            make_coefficient_table([1.0], [1.0], 1.0)

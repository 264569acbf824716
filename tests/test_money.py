"""Fixed-point cost/price conversion."""

from decimal import Decimal

import pytest

from tourdesk.services.money import (
    apply_surcharge,
    calculate_margin,
    calculate_profit,
    cost_from_price,
    price_from_cost,
    quantize_money,
    to_decimal,
)


class TestPriceFromCost:
    def test_reference_hotel_example(self):
        """9000 TRY at 25% markup and 35.5 TRY/EUR sells for 316.90 EUR."""
        assert price_from_cost(Decimal("9000"), Decimal("25"), Decimal("35.5")) == Decimal("316.90")

    def test_zero_markup(self):
        assert price_from_cost(3550, 0, "35.5") == Decimal("100.00")

    def test_rounds_half_up(self):
        """0.125 rounds to 0.13, not to the even neighbour."""
        assert price_from_cost("0.125", 0, 1) == Decimal("0.13")

    def test_accepts_floats_without_binary_artifacts(self):
        assert to_decimal(0.1) == Decimal("0.1")
        assert price_from_cost(0.1, 0, 1) == Decimal("0.10")

    @pytest.mark.parametrize(
        "cost,markup,rate",
        [
            (Decimal("-1"), Decimal("25"), Decimal("35")),
            (Decimal("100"), Decimal("-5"), Decimal("35")),
            (Decimal("100"), Decimal("25"), Decimal("0")),
            (Decimal("100"), Decimal("25"), Decimal("-35")),
        ],
    )
    def test_rejects_invalid_inputs(self, cost, markup, rate):
        with pytest.raises(ValueError):
            price_from_cost(cost, markup, rate)


class TestCostFromPrice:
    def test_inverse_of_reference_example(self):
        assert cost_from_price(Decimal("316.90"), Decimal("25"), Decimal("35.5")) == Decimal("8999.96")

    @pytest.mark.parametrize("cost", ["0", "1", "999.99", "9000", "123456.78"])
    @pytest.mark.parametrize("rate", ["1", "35.5", "38.123456"])
    def test_round_trip_within_one_cent_of_price(self, cost, rate):
        """cost -> price -> cost stays within one cent once scaled back to the sell currency."""
        markup = Decimal("25")
        price = price_from_cost(cost, markup, rate)
        back = cost_from_price(price, markup, rate)
        assert abs(price_from_cost(back, markup, rate) - price) <= Decimal("0.01")

    def test_rejects_non_positive_rate(self):
        with pytest.raises(ValueError):
            cost_from_price(Decimal("100"), Decimal("25"), Decimal("0"))


class TestMargin:
    def test_margin_of_reference_example(self):
        """25% markup is a 20% margin on the sell price."""
        assert calculate_margin(Decimal("316.90"), Decimal("9000"), Decimal("35.5")) == Decimal("20.00")

    def test_margin_is_zero_when_nothing_sold(self):
        assert calculate_margin(Decimal("0"), Decimal("9000"), Decimal("35.5")) == Decimal("0.00")

    def test_margin_can_be_negative(self):
        assert calculate_margin(Decimal("100"), Decimal("7100"), Decimal("35.5")) == Decimal("-100.00")

    def test_profit(self):
        assert calculate_profit(Decimal("316.90"), Decimal("9000"), Decimal("35.5")) == Decimal("63.38")


def test_apply_surcharge_is_unrounded():
    assert apply_surcharge(Decimal("2500"), Decimal("25")) == Decimal("3125.00")
    assert apply_surcharge(Decimal("0.01"), Decimal("50")) == Decimal("0.015")
    assert quantize_money(apply_surcharge(Decimal("0.01"), Decimal("50"))) == Decimal("0.02")

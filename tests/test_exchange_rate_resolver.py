"""Exchange rate selection by reference date."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from tourdesk.models import ExchangeRate
from tourdesk.services.errors import InvalidRate, NoRateOnOrBeforeDate, NoRatesAvailable
from tourdesk.services.exchange_rate_resolver import (
    pick_exchange_rate,
    resolve_exchange_rate,
    select_rate_by_date,
)


def fx(id, rate_date, rate):
    return ExchangeRate(id=id, from_currency="TRY", to_currency="EUR", rate=Decimal(rate), rate_date=rate_date)


HISTORY = [
    fx(1, date(2026, 1, 1), "34.80"),
    fx(2, date(2026, 4, 1), "35.50"),
    fx(3, date(2026, 7, 1), "36.20"),
]


class TestPickExchangeRate:
    def test_empty_history(self):
        with pytest.raises(NoRatesAvailable):
            pick_exchange_rate([], date(2026, 5, 1))

    def test_all_rates_in_the_future(self):
        with pytest.raises(NoRateOnOrBeforeDate) as exc_info:
            pick_exchange_rate(HISTORY, date(2025, 12, 31))
        assert exc_info.value.context["on_date"] == "2025-12-31"

    @pytest.mark.parametrize(
        "on_date, expected",
        [(date(2026, 2, 15), HISTORY[0]), (date(2026, 5, 15), HISTORY[1]), (date(2026, 12, 31), HISTORY[2])],
    )
    def test_each_rate_covers_its_interval(self, on_date, expected):
        picked = pick_exchange_rate(HISTORY, on_date)
        assert picked.id == expected.id
        assert picked.rate == expected.rate

    def test_latest_rate_on_or_before_date(self):
        assert pick_exchange_rate(HISTORY, date(2026, 6, 30)).id == 2

    def test_rate_date_is_inclusive(self):
        assert pick_exchange_rate(HISTORY, date(2026, 7, 1)).id == 3

    def test_order_of_history_does_not_matter(self):
        assert pick_exchange_rate(list(reversed(HISTORY)), date(2026, 5, 1)).id == 2

    def test_same_date_goes_to_newest_row(self):
        rates = HISTORY + [fx(9, date(2026, 4, 1), "35.90")]
        assert pick_exchange_rate(rates, date(2026, 5, 1)).id == 9

    def test_datetime_is_truncated_to_date(self):
        assert pick_exchange_rate(HISTORY, datetime(2026, 4, 1, 23, 59)).id == 2

    def test_non_positive_rate_is_invalid(self):
        rates = [fx(1, date(2026, 1, 1), "0")]
        with pytest.raises(InvalidRate) as exc_info:
            pick_exchange_rate(rates, date(2026, 2, 1))
        assert exc_info.value.context["exchange_rate_id"] == 1

    def test_select_rate_by_date_returns_value(self):
        assert select_rate_by_date(HISTORY, date(2026, 12, 31)) == Decimal("36.20")


class TestResolveExchangeRate:
    async def test_resolves_from_tenant_history(self, db, tenant, add_fx):
        """The stored history of the tenant's pair is used."""
        await add_fx("34.80", date(2026, 1, 1))
        expected = await add_fx("35.50", date(2026, 4, 1))

        resolved = await resolve_exchange_rate(db, tenant.id, "try", "eur", date(2026, 5, 1))

        assert resolved.id == expected.id
        assert resolved.rate == Decimal("35.5")

    async def test_other_tenants_rates_are_invisible(self, db, tenant, other_tenant, add_fx):
        await add_fx("35.50", date(2026, 4, 1), tenant_id=other_tenant.id)

        with pytest.raises(NoRatesAvailable) as exc_info:
            await resolve_exchange_rate(db, tenant.id, "TRY", "EUR", date(2026, 5, 1))
        assert exc_info.value.context["from_currency"] == "TRY"
        assert exc_info.value.context["to_currency"] == "EUR"

    async def test_other_pairs_are_ignored(self, db, tenant, add_fx):
        await add_fx("38.00", date(2026, 4, 1), from_currency="TRY", to_currency="USD")

        with pytest.raises(NoRatesAvailable):
            await resolve_exchange_rate(db, tenant.id, "TRY", "EUR", date(2026, 5, 1))

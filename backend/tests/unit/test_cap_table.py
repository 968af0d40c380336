"""Unit tests for cap table analytics and share-term resolution"""
from datetime import date
from decimal import Decimal
from types import SimpleNamespace

import pytest

from app.services.cap_table import equity_distribution, implied_post_money, investment_summary, valuation_history
from app.services.errors import ValidationError
from app.services.investment_store import resolve_share_terms


def investment(on, amount, investment_type="Equity", equity="0", pre=None, post=None, name="Seed Fund"):
    return SimpleNamespace(
        date=on,
        investor_name=name,
        amount=Decimal(str(amount)),
        investment_type=investment_type,
        equity_allocated=Decimal(equity),
        pre_money_valuation=Decimal(str(pre)) if pre is not None else None,
        post_money_valuation=Decimal(str(post)) if post is not None else None,
    )


class TestInvestmentSummary:
    """Tests for funding split by instrument"""

    def test_no_investments(self):
        summary = investment_summary([])
        assert summary.total_investments == 0
        assert summary.total_equity_funding == 0
        assert summary.avg_equity_allocated == 0

    def test_split_by_type(self):
        summary = investment_summary([
            investment(date(2024, 1, 1), 100000, "Equity", equity="10"),
            investment(date(2024, 2, 1), 50000, "Debt"),
            investment(date(2024, 3, 1), 25000, "Grant"),
            investment(date(2024, 4, 1), 40000, "Equity", equity="5"),
        ])
        assert summary.total_equity_funding == Decimal("140000")
        assert summary.total_debt_funding == Decimal("50000")
        assert summary.total_grant_funding == Decimal("25000")
        assert summary.total_investments == 4
        assert summary.avg_equity_allocated == Decimal("3.75")


class TestImpliedPostMoney:
    """Tests for post-money valuation inference"""

    def test_stated_post_money(self):
        assert implied_post_money(investment(date(2024, 1, 1), 100, post=5000, pre=1)) == Decimal("5000")

    def test_from_pre_money(self):
        assert implied_post_money(investment(date(2024, 1, 1), 100, pre=900)) == Decimal("1000")

    def test_from_equity(self):
        assert implied_post_money(investment(date(2024, 1, 1), 100000, equity="10")) == Decimal("1000000")

    def test_unknown(self):
        assert implied_post_money(investment(date(2024, 1, 1), 100)) is None


class TestValuationHistory:
    """Tests for the valuation chart series"""

    def test_recorded_valuations_win(self):
        recorded = [
            SimpleNamespace(round_type="Seed", valuation=Decimal("2000000"), investment_amount=Decimal("0"),
                            date=date(2024, 6, 1)),
            SimpleNamespace(round_type="Pre-Seed", valuation=Decimal("500000"), investment_amount=Decimal("0"),
                            date=date(2023, 6, 1)),
        ]
        points = valuation_history(recorded, [investment(date(2024, 1, 1), 100, post=1)])
        assert [p.round_name for p in points] == ["Pre-Seed", "Seed"]

    def test_derived_from_investments(self):
        points = valuation_history([], [
            investment(date(2024, 3, 1), 50000, equity="5"),
            investment(date(2024, 1, 1), 100000, post=900000),
            investment(date(2024, 3, 1), 20000, post=1200000),
        ])
        assert [p.date for p in points] == [date(2024, 1, 1), date(2024, 3, 1)]
        assert points[0].valuation == Decimal("900000")
        assert points[1].valuation == Decimal("1200000")
        assert points[1].investment_amount == Decimal("70000")
        assert all(p.round_name == "Investment Round" for p in points)


def founder(name, equity="0"):
    return SimpleNamespace(name=name, equity_percentage=Decimal(equity))


class TestEquityDistribution:
    """Tests for the founder and investor ownership split"""

    def test_unstated_founders_split_the_remainder(self):
        holdings = equity_distribution(
            [founder("Asha"), founder("Ben")],
            [investment(date(2024, 1, 1), 100000, equity="20", name="Seed Fund")],
        )
        assert [(h.holder_type, h.holder_name, h.equity_percentage) for h in holdings] == [
            ("Founder", "Asha", Decimal("40")),
            ("Founder", "Ben", Decimal("40")),
            ("Investor", "Seed Fund", Decimal("20")),
        ]
        assert holdings[0].total_amount == 0
        assert holdings[2].total_amount == Decimal("100000")

    def test_stated_founder_equity_kept(self):
        holdings = equity_distribution(
            [founder("Asha", "50"), founder("Ben"), founder("Chen")],
            [investment(date(2024, 1, 1), 10000, equity="20")],
        )
        by_name = {h.holder_name: h.equity_percentage for h in holdings}
        assert by_name == {"Asha": Decimal("50"), "Ben": Decimal("15"), "Chen": Decimal("15"), "Seed Fund": Decimal("20")}
        assert holdings[0].holder_name == "Asha"

    def test_uneven_split_is_rounded(self):
        holdings = equity_distribution([founder("A"), founder("B"), founder("C")], [])
        assert {h.equity_percentage for h in holdings} == {Decimal("33.3333")}

    def test_overallocated_investors_leave_founders_at_zero(self):
        holdings = equity_distribution(
            [founder("Asha")],
            [investment(date(2024, 1, 1), 1, equity="70"), investment(date(2024, 2, 1), 1, equity="40")],
        )
        assert holdings[-1].holder_name == "Asha"
        assert holdings[-1].equity_percentage == 0

    def test_no_founders(self):
        holdings = equity_distribution([], [investment(date(2024, 1, 1), 500, equity="5")])
        assert [h.holder_type for h in holdings] == ["Investor"]

    def test_empty(self):
        assert equity_distribution([], []) == []


class TestShareTerms:
    """Tests for shares / price per share resolution"""

    def test_neither_given(self):
        assert resolve_share_terms(Decimal("1000"), None, None) == (None, None)

    def test_price_derived(self):
        assert resolve_share_terms(Decimal("1000"), 400, None) == (400, Decimal("2.5"))

    def test_price_derived_is_rounded(self):
        assert resolve_share_terms(Decimal("100000"), 33333, None) == (33333, Decimal("3.0000"))

    def test_shares_derived(self):
        assert resolve_share_terms(Decimal("1000"), None, Decimal("2.5")) == (400, Decimal("2.5"))

    def test_both_given(self):
        assert resolve_share_terms(Decimal("1000"), 100, Decimal("10")) == (100, Decimal("10"))

    def test_both_given_within_price_rounding(self):
        assert resolve_share_terms(Decimal("100000"), 33333, Decimal("3.0000")) == (33333, Decimal("3.0000"))

    @pytest.mark.parametrize("shares,price", [
        (10, Decimal("1")),
        (400, Decimal("2.6")),
        (None, Decimal("3")),
    ])
    def test_inconsistent_with_amount(self, shares, price):
        with pytest.raises(ValidationError):
            resolve_share_terms(Decimal("1000"), shares, price)

    @pytest.mark.parametrize("shares,price", [(0, None), (-5, None), (None, Decimal("0")), (None, Decimal("5000"))])
    def test_invalid(self, shares, price):
        with pytest.raises(ValidationError):
            resolve_share_terms(Decimal("1000"), shares, price)

"""
Cap Table Analytics

Summaries derived from investment and valuation records. Like the
aggregation engine these are pure functions over already-loaded rows.
"""
from collections import OrderedDict
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from app.schemas.investment import InvestmentRoundType
from app.services.aggregation import ZERO, safe_average, to_decimal


@dataclass
class InvestmentSummary:
    """Funding split by instrument"""
    total_equity_funding: Decimal
    total_debt_funding: Decimal
    total_grant_funding: Decimal
    total_investments: int
    avg_equity_allocated: Decimal


@dataclass
class ValuationPoint:
    """One point on the valuation history chart"""
    round_name: str
    valuation: Decimal
    investment_amount: Decimal
    date: date


def investment_summary(investments: Iterable[Any]) -> InvestmentSummary:
    """Totals per investment type and the mean equity allocated (0 with no investments)"""
    investments = list(investments)
    totals: Dict[str, Decimal] = {t.value: ZERO for t in InvestmentRoundType}
    for inv in investments:
        if inv.investment_type in totals:
            totals[inv.investment_type] += to_decimal(inv.amount)

    return InvestmentSummary(
        total_equity_funding=totals[InvestmentRoundType.EQUITY.value],
        total_debt_funding=totals[InvestmentRoundType.DEBT.value],
        total_grant_funding=totals[InvestmentRoundType.GRANT.value],
        total_investments=len(investments),
        avg_equity_allocated=safe_average(inv.equity_allocated for inv in investments),
    )


def implied_post_money(inv: Any) -> Optional[Decimal]:
    """Post-money valuation stated on the record, else implied by pre-money or equity"""
    if inv.post_money_valuation is not None:
        return to_decimal(inv.post_money_valuation)
    if inv.pre_money_valuation is not None:
        return to_decimal(inv.pre_money_valuation) + to_decimal(inv.amount)
    equity = to_decimal(inv.equity_allocated)
    if equity > 0:
        return to_decimal(inv.amount) * 100 / equity
    return None


def valuation_history(valuations: Iterable[Any], investments: Iterable[Any]) -> List[ValuationPoint]:
    """
    Valuation over time, oldest first.

    Recorded valuations are used when any exist. Otherwise the history is
    derived from investments: one point per investment date, valued at the
    highest post-money valuation recorded that day, with that day's
    investments summed.
    """
    valuations = list(valuations)
    if valuations:
        points = [
            ValuationPoint(
                round_name=v.round_type,
                valuation=to_decimal(v.valuation),
                investment_amount=to_decimal(v.investment_amount),
                date=v.date,
            )
            for v in valuations
        ]
        return sorted(points, key=lambda p: p.date)

    by_date: "OrderedDict[date, ValuationPoint]" = OrderedDict()
    for inv in sorted(investments, key=lambda i: i.date):
        point = by_date.get(inv.date)
        if point is None:
            point = by_date[inv.date] = ValuationPoint(
                round_name="Investment Round",
                valuation=ZERO,
                investment_amount=ZERO,
                date=inv.date,
            )
        point.investment_amount += to_decimal(inv.amount)
        post_money = implied_post_money(inv)
        if post_money is not None and post_money > point.valuation:
            point.valuation = post_money
    return list(by_date.values())


@dataclass
class EquityHolding:
    """One holder's slice of the company"""
    holder_type: str
    holder_name: str
    equity_percentage: Decimal
    total_amount: Decimal


FOUNDER = "Founder"
INVESTOR = "Investor"
_EQUITY_PLACES = Decimal("0.0001")


def equity_distribution(founders: Iterable[Any], investments: Iterable[Any]) -> List[EquityHolding]:
    """
    Ownership split between founders and investors, largest stake first.

    Every investment is an investor slice at its allocated equity. Founders
    with a stated percentage keep it; the others split whatever is left of
    100% equally, never below zero. Founders carry no invested amount.
    """
    founders = list(founders)
    investor_slices = [
        EquityHolding(
            holder_type=INVESTOR,
            holder_name=inv.investor_name,
            equity_percentage=to_decimal(inv.equity_allocated),
            total_amount=to_decimal(inv.amount),
        )
        for inv in investments
    ]

    stated = ZERO
    unstated = 0
    for founder in founders:
        equity = to_decimal(founder.equity_percentage)
        if equity > 0:
            stated += equity
        else:
            unstated += 1

    remainder = Decimal("100") - stated - sum((h.equity_percentage for h in investor_slices), ZERO)
    even_split = ZERO
    if unstated:
        even_split = (max(remainder, ZERO) / unstated).quantize(_EQUITY_PLACES)

    founder_slices = [
        EquityHolding(
            holder_type=FOUNDER,
            holder_name=founder.name,
            equity_percentage=to_decimal(founder.equity_percentage) or even_split,
            total_amount=ZERO,
        )
        for founder in founders
    ]
    return sorted(founder_slices + investor_slices, key=lambda h: h.equity_percentage, reverse=True)

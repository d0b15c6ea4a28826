from __future__ import annotations

from typing import Iterable, Mapping

from domain.models import Holding, PriceQuote, SavingsGoal
from domain.schemas import PortfolioMetrics, SavingsMetrics, WealthSummary

HIGH_RISK_DIVERSIFICATION = 40.0


def _prices(holding: Holding, quotes: Mapping[str, PriceQuote | float]) -> tuple[float, float]:
    quote = quotes.get(holding.symbol)
    if isinstance(quote, PriceQuote):
        price = quote.price or holding.avg_price
        prev_close = quote.prev_close or holding.prev_close or holding.avg_price
    else:
        price = float(quote or 0) or holding.avg_price
        prev_close = holding.prev_close or holding.avg_price
    return price, prev_close


def compute_portfolio_metrics(
    holdings: Iterable[Holding],
    quotes: Mapping[str, PriceQuote | float],
) -> PortfolioMetrics:
    """
    Value holdings at the supplied quotes, falling back to the average cost
    when a symbol has no quote. `quotes` is whatever price snapshot the caller
    holds; nothing is fetched or cached here.
    """
    rows = list(holdings)
    market_values: list[float] = []
    total_cost = 0.0
    daily_gain = 0.0

    for holding in rows:
        price, prev_close = _prices(holding, quotes)
        market_values.append(holding.quantity * price)
        total_cost += holding.quantity * holding.avg_price
        daily_gain += (price - prev_close) * holding.quantity

    total_value = sum(market_values)
    total_gain = total_value - total_cost
    gain_percentage = total_gain / total_cost * 100 if total_cost > 0 else 0.0

    diversification = 100.0
    if rows and total_value > 0:
        max_concentration = max(value / total_value for value in market_values)
        diversification = min(100.0, max(0.0, 100 - max_concentration * 100))

    return PortfolioMetrics(
        total_value=round(total_value, 2),
        invested_value=round(total_cost, 2),
        total_gain=round(total_gain, 2),
        gain_percentage=round(gain_percentage, 2),
        daily_gain=round(daily_gain, 2),
        diversification_score=round(diversification, 2),
    )


def compute_savings_metrics(goals: Iterable[SavingsGoal]) -> SavingsMetrics:
    total_saved = 0.0
    total_target = 0.0
    for goal in goals:
        total_saved += goal.saved
        total_target += goal.target
    completion = total_saved / total_target * 100 if total_target > 0 else 0.0
    return SavingsMetrics(
        total_saved=round(total_saved, 2),
        total_target=round(total_target, 2),
        completion_status=round(completion, 2),
    )


def summarize_wealth(portfolio: PortfolioMetrics, savings: SavingsMetrics) -> WealthSummary:
    return WealthSummary(
        total_wealth=round(portfolio.total_value + savings.total_saved, 2),
        portfolio_gain=portfolio.gain_percentage,
        diversification=portfolio.diversification_score,
        savings_progress=savings.completion_status,
        risk_profile="High" if portfolio.diversification_score < HIGH_RISK_DIVERSIFICATION else "Low",
    )

"""
Derived statistics and rule-based insights over the earnings history.
"""

from __future__ import annotations

import calendar
from datetime import date, timedelta
from typing import List, Optional, Tuple

import pandas as pd

from earnings import CATEGORY_LABELS, EarningsRepository, format_amount, format_date, parse_amount
from models import AnalyticsReport, Insight

MAX_INSIGHTS = 5


def _leader(totals: pd.Series) -> Tuple[Optional[str], float]:
    """Key with the highest positive total; the first one wins a tie."""
    positive = totals[totals > 0]
    if positive.empty:
        return None, 0.0
    key = positive.idxmax()
    return key, float(positive[key])


def format_percent(value: float) -> str:
    """One decimal at most, without a trailing ``.0``: 25.0 -> '25', 12.5 -> '12.5'."""
    return f"{value:.1f}".rstrip("0").rstrip(".")


def days_in_month(day: date) -> int:
    return calendar.monthrange(day.year, day.month)[1]


class AnalyticsEngine:
    def __init__(self, repository: EarningsRepository):
        self.repository = repository
        self.store = repository.store

    def currency(self) -> str:
        return self.store.currency()

    def compute_analytics(self) -> AnalyticsReport:
        df = self.repository.frame()
        today = self.repository.today()

        monthly = df[df["day"] >= pd.Timestamp(today.replace(day=1))]
        monthly_total = float(monthly["amount"].sum())
        avg_daily = monthly_total / today.day if today.day > 0 else 0.0

        by_source = self.repository.by_source()
        top_source, top_source_amount = _leader(pd.Series(by_source, dtype=float))

        # Whole history, not windowed
        by_day = df.dropna(subset=["day_key"]).groupby("day_key", sort=False)["amount"].sum()
        best_day, best_day_amount = _leader(by_day)

        return AnalyticsReport(
            total_entries=len(df),
            total_amount=float(df["amount"].sum()),
            monthly_total=monthly_total,
            avg_daily=avg_daily,
            top_source=top_source,
            top_source_amount=top_source_amount,
            best_day=best_day,
            best_day_amount=best_day_amount,
            by_source=by_source,
        )

    def streak(self) -> int:
        """Consecutive days with an earning, counted back from today or yesterday."""
        df = self.repository.frame()
        days = set(df["day"].dropna().dt.date)
        if not days:
            return 0

        today = self.repository.today()
        latest = max(days)
        if latest not in (today, today - timedelta(days=1)):
            return 0

        streak = 0
        current = latest
        while current in days:
            streak += 1
            current -= timedelta(days=1)
        return streak

    def generate_insights(self) -> List[Insight]:
        if not self.repository.all():
            return [Insight(icon="🚀", text="Start adding your earnings to get personalized insights!")]

        currency = self.currency()
        today = self.repository.today()
        summary = self.repository.summary()
        analytics = self.compute_analytics()
        insights = []

        trend = float(summary.trend)
        if trend > 0:
            insights.append(Insight(
                icon="📈",
                text=f"Your earnings are up {summary.trend}% compared to last month. Keep it up!",
            ))
        elif trend < 0:
            insights.append(Insight(
                icon="📉",
                text=f"Your earnings are down {format_percent(abs(trend))}% from last month. "
                     "Time to explore new opportunities!",
            ))

        if analytics.top_source:
            share = analytics.top_source_amount / analytics.total_amount * 100 if analytics.total_amount > 0 else 0
            label = CATEGORY_LABELS.get(analytics.top_source, analytics.top_source)
            insights.append(Insight(
                icon="🏆",
                text=f"{label} is your top earning source ({share:.0f}% of total earnings).",
            ))

        sources = len(analytics.by_source)
        if sources == 1:
            insights.append(Insight(icon="💡", text="Consider diversifying your income streams for financial stability."))
        elif sources >= 3:
            insights.append(Insight(icon="🌟", text=f"Great job! You have {sources} different income sources."))

        goal_insight = self._goal_insight(summary.monthly, today, currency)
        if goal_insight:
            insights.append(goal_insight)

        if summary.weekly > 0:
            insights.append(Insight(
                icon="📅",
                text=f"This week: {currency}{format_amount(summary.weekly)} earned "
                     f"(avg {currency}{format_amount(summary.weekly / 7)}/day)",
            ))

        if analytics.best_day:
            insights.append(Insight(
                icon="🔥",
                text=f"Your best earning day was {format_date(analytics.best_day, today)} "
                     f"with {currency}{format_amount(analytics.best_day_amount)}.",
            ))

        return insights[:MAX_INSIGHTS]

    def _goal_insight(self, earned: float, today: date, currency: str) -> Optional[Insight]:
        profile = self.store.get_profile() or {}
        goal = parse_amount(profile.get("monthlyGoal"))
        if goal <= 0:
            return None

        progress = earned / goal * 100
        total_days = days_in_month(today)
        days_left = total_days - today.day
        expected = today.day / total_days * 100

        if progress >= expected:
            return Insight(
                icon="🎯",
                text=f"You're ahead of your monthly goal! {progress:.0f}% achieved with {days_left} days remaining.",
            )

        needed = goal - earned
        if days_left <= 0:
            # Last day of the month: everything still missing is due today
            return Insight(icon="💪", text=f"Earn {currency}{format_amount(needed)} today to reach your monthly goal.")
        return Insight(
            icon="💪",
            text=f"Earn {currency}{format_amount(needed / days_left)} per day to reach your monthly goal.",
        )

    # --- Chart series ---

    def trend_series(self, window_days: int = 30) -> Tuple[List[str], List[float]]:
        by_date = self.repository.by_date(window_days)
        labels = [f"{day.day} {day.strftime('%b')}" for day in map(date.fromisoformat, by_date)]
        return labels, list(by_date.values())

    def monthly_series(self, window_months: int = 6) -> Tuple[List[str], List[float]]:
        buckets = self.repository.monthly_totals(window_months).values()
        return [b.label for b in buckets], [b.total for b in buckets]

    def source_series(self) -> Tuple[List[str], List[float]]:
        by_source = self.repository.by_source()
        return [CATEGORY_LABELS.get(c, c) for c in by_source], list(by_source.values())

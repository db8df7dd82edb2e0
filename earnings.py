"""
earnings.py
-----------
Earning entries: create/edit/delete against the entity store, plus the
filtering, grouping and summary math every dashboard card and chart is
built from.

Amounts are parsed permissively: anything that is not a finite number
counts as zero during aggregation and is never rejected when read back.
"""

from __future__ import annotations

import logging
import math
import uuid
from datetime import date, datetime, timedelta
from typing import Any, Callable, Dict, Iterable, List, Optional

import pandas as pd
from pydantic import ValidationError

from models import EarningCreate, MonthBucket, Summary
from storage import EntityStore, now_iso

logger = logging.getLogger(__name__)

CATEGORY_ICONS = {
    "cashback": "💳",
    "referral": "🤝",
    "freelance": "💼",
    "salary": "💰",
    "business": "🏢",
    "passive": "📈",
}

CATEGORY_LABELS = {
    "cashback": "Cashback & Rewards",
    "referral": "Referral Earnings",
    "freelance": "Freelance / Project",
    "salary": "Salary / Stipend",
    "business": "Business Income",
    "passive": "Passive Income",
}

FRAME_COLUMNS = ["id", "amount", "category", "date", "source", "notes"]


class EarningValidationError(ValueError):
    """Raised when a new or edited earning lacks a usable amount, category or date."""

    def __init__(self, fields: List[str]):
        self.fields = fields
        super().__init__(f"Please fill in all required fields: {', '.join(fields)}")


def parse_amount(value: Any) -> float:
    if isinstance(value, bool):
        return 0.0
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return 0.0
    return amount if math.isfinite(amount) else 0.0


def parse_day(value: Any) -> Optional[date]:
    """Calendar date of a stored ``date`` field, or None when it cannot be read."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value.strip()).date()
    except ValueError:
        return None


def to_frame(earnings: Iterable[Any]) -> pd.DataFrame:
    """
    Build the working DataFrame: numeric ``amount``, string ``category``
    (missing when not a string), normalized ``day`` (NaT when unparseable)
    and its ISO ``day_key``.
    """
    rows = [e for e in earnings or [] if isinstance(e, dict)]
    df = pd.DataFrame(rows, columns=FRAME_COLUMNS)
    df["amount"] = df["amount"].map(parse_amount).astype(float)
    df["category"] = df["category"].where(df["category"].map(lambda c: isinstance(c, str)).astype(bool))
    df["day"] = pd.to_datetime(df["date"].map(parse_day), errors="coerce")
    df["day_key"] = df["day"].dt.strftime("%Y-%m-%d")
    return df


def format_amount(amount: Any) -> str:
    """Compact display amount: lakhs as ``L``, thousands as ``K``."""
    num = parse_amount(amount)
    if num >= 100000:
        return f"{num / 100000:.1f}L"
    if num >= 1000:
        return f"{num / 1000:.1f}K"
    return f"{num:,.3f}".rstrip("0").rstrip(".")


def format_date(value: Any, today: date) -> str:
    day = parse_day(value)
    if day is None:
        return str(value)
    if day >= today:
        return "Today"
    if day >= today - timedelta(days=1):
        return "Yesterday"
    label = f"{day.day} {day.strftime('%b')}"
    return label if day.year == today.year else f"{label} {day.year}"


def range_start(date_range: Optional[str], today: date) -> Optional[date]:
    """Earliest date included by a relative range; None means no bound."""
    if date_range == "today":
        return today
    if date_range == "week":
        return today - timedelta(days=7)
    if date_range == "month":
        return today.replace(day=1)
    if date_range == "year":
        return today.replace(month=1, day=1)
    return None


def previous_month_bounds(today: date) -> tuple[date, date]:
    month_start = today.replace(day=1)
    last_month_end = month_start - timedelta(days=1)
    return last_month_end.replace(day=1), last_month_end


def _since(df: pd.DataFrame, start: date) -> pd.DataFrame:
    return df[df["day"] >= pd.Timestamp(start)]


def _between(df: pd.DataFrame, start: date, end: date) -> pd.DataFrame:
    return df[(df["day"] >= pd.Timestamp(start)) & (df["day"] <= pd.Timestamp(end))]


class EarningsRepository:
    def __init__(self, store: EntityStore, clock: Callable[[], date] = date.today):
        self.store = store
        self.clock = clock

    def today(self) -> date:
        return self.clock()

    def all(self) -> List[Dict[str, Any]]:
        return self.store.get_earnings() or []

    def frame(self) -> pd.DataFrame:
        return to_frame(self.all())

    # --- CRUD ---

    def _validate(self, data: Dict[str, Any]) -> EarningCreate:
        try:
            return EarningCreate.model_validate(data)
        except ValidationError as exc:
            fields = sorted({str(err["loc"][0]) for err in exc.errors() if err["loc"]})
            raise EarningValidationError(fields) from exc

    def add_earning(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Validate and prepend a new earning; newest entries come first."""
        payload = self._validate(data)
        earning = {
            "id": uuid.uuid4().hex,
            "amount": payload.amount,
            "category": payload.category,
            "date": payload.date.isoformat(),
            "source": payload.source,
            "notes": payload.notes,
            "createdAt": now_iso(),
        }
        earnings = self.all()
        earnings.insert(0, earning)
        self.store.save_earnings(earnings)
        logger.info("Added %s earning of %.2f on %s", earning["category"], earning["amount"], earning["date"])
        return earning

    def get_earning(self, earning_id: str) -> Optional[Dict[str, Any]]:
        return next((e for e in self.all() if isinstance(e, dict) and e.get("id") == earning_id), None)

    def update_earning(self, earning_id: str, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        earnings = self.all()
        for index, existing in enumerate(earnings):
            if isinstance(existing, dict) and existing.get("id") == earning_id:
                break
        else:
            return None

        merged = {**existing, **updates}
        payload = self._validate(merged)
        merged.update(
            id=earning_id,
            amount=payload.amount,
            category=payload.category,
            date=payload.date.isoformat(),
            source=payload.source,
            notes=payload.notes,
            updatedAt=now_iso(),
        )
        earnings[index] = merged
        self.store.save_earnings(earnings)
        logger.info("Updated earning %s", earning_id)
        return merged

    def delete_earning(self, earning_id: str) -> Optional[Dict[str, Any]]:
        earnings = self.all()
        removed = self.get_earning(earning_id)
        if removed is None:
            return None
        self.store.save_earnings([e for e in earnings if not (isinstance(e, dict) and e.get("id") == earning_id)])
        logger.info("Deleted earning %s", earning_id)
        return removed

    # --- Queries ---

    def filtered(self, category: Optional[str] = None, date_range: Optional[str] = None) -> List[Dict[str, Any]]:
        """Earnings matching an exact category and a relative date range."""
        rows = [e for e in self.all() if isinstance(e, dict)]
        df = to_frame(rows)
        mask = pd.Series(True, index=df.index, dtype=bool)
        if category and category != "all":
            mask &= df["category"] == category
        start = range_start(date_range, self.today())
        if start is not None:
            mask &= df["day"] >= pd.Timestamp(start)
        return [rows[i] for i in df.index[mask.to_numpy()]]

    @staticmethod
    def total(earnings: Iterable[Any]) -> float:
        return float(to_frame(earnings)["amount"].sum())

    def summary(self) -> Summary:
        df = self.frame()
        today = self.today()

        weekly = _since(df, today - timedelta(days=6))
        monthly = _since(df, today.replace(day=1))
        last_month = _between(df, *previous_month_bounds(today))

        monthly_total = float(monthly["amount"].sum())
        last_month_total = float(last_month["amount"].sum())

        # No baseline last month reads as a flat trend
        trend = 0.0
        if last_month_total > 0:
            trend = (monthly_total - last_month_total) / last_month_total * 100

        return Summary(
            total=float(df["amount"].sum()),
            weekly=float(weekly["amount"].sum()),
            weekly_count=len(weekly),
            monthly=monthly_total,
            monthly_count=len(monthly),
            last_month=last_month_total,
            trend=f"{trend:.1f}",
        )

    def yearly(self) -> Dict[str, Any]:
        year = _since(self.frame(), self.today().replace(month=1, day=1))
        return {"total": float(year["amount"].sum()), "count": len(year)}

    def by_source(self) -> Dict[str, float]:
        """Category totals in the order each category first appears."""
        df = self.frame().dropna(subset=["category"])
        grouped = df.groupby("category", sort=False)["amount"].sum()
        return {category: float(amount) for category, amount in grouped.items()}

    def by_date(self, window_days: int = 30) -> Dict[str, float]:
        """
        Daily totals for the last ``window_days`` days, oldest first.

        Only entries whose stored date string equals a window key are counted.
        """
        today = self.today()
        keys = [(today - timedelta(days=offset)).isoformat() for offset in range(window_days - 1, -1, -1)]
        df = self.frame()
        wanted = set(keys)
        df = df[df["date"].map(lambda d: isinstance(d, str) and d in wanted).astype(bool)]
        sums = df.groupby("date", sort=False)["amount"].sum()
        return {key: float(sums.get(key, 0.0)) for key in keys}

    def monthly_totals(self, window_months: int = 6) -> Dict[str, MonthBucket]:
        today = self.today()
        current = pd.Period(year=today.year, month=today.month, freq="M")
        periods = [current - offset for offset in range(window_months - 1, -1, -1)]

        buckets = {p.strftime("%Y-%m"): MonthBucket(label=p.strftime("%b")) for p in periods}
        df = self.frame()
        df = df[df["day"].notna()]
        sums = df.groupby(df["day"].dt.strftime("%Y-%m"), sort=False)["amount"].sum()
        for key, bucket in buckets.items():
            bucket.total = float(sums.get(key, 0.0))
        return buckets

"""
seed_db.py
----------
Create the ``kv_store`` table, seed default profile/settings/achievement
records and optionally a run of demo earnings.

Usage:

    python seed_db.py [--database-url sqlite:///earnings_analyzer.db] [--demo-days 14] [--goal 20000]
"""

import argparse
from datetime import date, timedelta
from itertools import cycle
from typing import Optional

from config import configure_logging
from earnings import EarningsRepository
from goals import GoalsEngine
from models import CATEGORIES
from notifications import LogNotifier, notify_earning_added
from storage import EntityStore, open_store

DEMO_AMOUNTS = (250, 1200, 4800, 75, 15000, 640)


def seed_demo_earnings(store: EntityStore, days: int, today: Optional[date] = None) -> int:
    """Add one earning per day for the last ``days`` days, cycling categories."""
    today = today or date.today()
    repository = EarningsRepository(store, clock=lambda: today)
    notifier = LogNotifier()
    currency = store.currency()
    pairs = zip(cycle(CATEGORIES), cycle(DEMO_AMOUNTS))
    for offset in range(days - 1, -1, -1):
        category, amount = next(pairs)
        repository.add_earning({
            "amount": amount,
            "category": category,
            "date": (today - timedelta(days=offset)).isoformat(),
            "source": "Demo",
        })
        notify_earning_added(notifier, amount, category, currency)
    return days


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed the earnings analyzer store")
    parser.add_argument("--database-url", default=None, help="SQLAlchemy URL; defaults to DATABASE_URL")
    parser.add_argument("--demo-days", type=int, default=0, help="Add one demo earning per day for N days")
    parser.add_argument("--goal", type=float, default=None, help="Monthly goal to set on the profile")
    return parser.parse_args()


def main() -> None:
    configure_logging()
    args = parse_args()
    store = open_store(args.database_url)

    if store.get_earnings():
        print("Earnings already exist. Skipping demo seed.")
    elif args.demo_days > 0:
        seed_demo_earnings(store, args.demo_days)
        print(f"Seeded {args.demo_days} demo earnings.")

    goals = GoalsEngine(EarningsRepository(store))
    if args.goal is not None:
        goals.set_monthly_goal(args.goal)
    unlocked = goals.check_achievements()
    print(f"Store initialized ({len(unlocked)} achievements unlocked).")


if __name__ == "__main__":
    main()

"""Notification sink used for achievement unlocks and earning/goal feedback."""

import logging
from typing import Optional, Protocol

from earnings import CATEGORY_LABELS, format_amount

logger = logging.getLogger(__name__)

DEFAULT_ICONS = {"success": "✅", "error": "❌", "info": "ℹ️"}


class Notifier(Protocol):
    def show(self, message: str, kind: str = "info", icon: Optional[str] = None) -> None:  # pragma: no cover - interface
        ...


class LogNotifier:
    """Writes notifications to the log instead of a toast widget."""

    def show(self, message: str, kind: str = "info", icon: Optional[str] = None) -> None:
        level = logging.ERROR if kind == "error" else logging.INFO
        logger.log(level, "%s %s", icon or DEFAULT_ICONS.get(kind, "ℹ️"), message)


def notify_earning_added(notifier: Notifier, amount, category: str, currency: str) -> None:
    label = CATEGORY_LABELS.get(category, category)
    notifier.show(f"{currency}{format_amount(amount)} added to {label}", "success", "💰")


def notify_goal_progress(notifier: Notifier, percentage: float) -> bool:
    """Celebrate goal milestones (50/75/100%); returns whether anything was shown."""
    if percentage >= 100:
        notifier.show("🎉 Congratulations! You've reached your monthly goal!", "success", "🏆")
    elif percentage >= 75:
        notifier.show(f"Almost there! {percentage:.0f}% of your goal completed.", "info", "🎯")
    elif percentage >= 50:
        notifier.show(f"Halfway there! {percentage:.0f}% of your goal completed.", "info", "💪")
    else:
        return False
    return True

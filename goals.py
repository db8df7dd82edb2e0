"""
Monthly goal tracking and one-way achievement badges.
"""

import logging
from typing import Dict, List, Optional

from analytics import AnalyticsEngine
from config import Config
from earnings import EarningsRepository, parse_amount
from models import AchievementDefinition, GoalProgress
from notifications import LogNotifier, Notifier

logger = logging.getLogger(__name__)

ACHIEVEMENTS: Dict[str, AchievementDefinition] = {
    a.id: a
    for a in (
        AchievementDefinition(id="firstEarning", icon="🌟", title="First Earning",
                              description="Add your first earning entry"),
        AchievementDefinition(id="diversified", icon="📊", title="Diversified",
                              description="Earn from 3+ sources"),
        AchievementDefinition(id="goalSetter", icon="🎯", title="Goal Setter",
                              description="Set your first monthly goal"),
        AchievementDefinition(id="goalCrusher", icon="💪", title="Goal Crusher",
                              description="Achieve 100% of monthly goal"),
        AchievementDefinition(id="onFire", icon="🔥", title="On Fire",
                              description=f"{Config.STREAK_TARGET}-day earning streak"),
        AchievementDefinition(id="highRoller", icon="💰", title="High Roller",
                              description="Earn {currency}{threshold:,.0f}+ in a single entry"),
    )
}

OCCUPATION_TIPS = {
    "student": [
        "Look for internship opportunities that offer stipends",
        "Participate in coding competitions with cash prizes",
        "Offer tutoring services in subjects you excel at",
    ],
    "freelancer": [
        "Build a strong portfolio to attract higher-paying clients",
        "Diversify your client base to reduce dependency",
        "Consider creating passive income through digital products",
    ],
    "employee": [
        "Look for side projects that complement your skills",
        "Consider upskilling for better salary negotiations",
        "Explore investment opportunities for passive income",
    ],
}

GENERAL_TIPS = [
    "Track all your cashback and reward earnings from UPI apps",
    "Share referral codes to earn passive bonuses",
    "Consider freelance opportunities in your skill area",
    "Invest in skills that can increase your earning potential",
    "Set realistic monthly goals and work towards them consistently",
    "Review your expenses to find areas to save money",
]

MAX_TIPS = 5


class GoalsEngine:
    def __init__(
        self,
        repository: EarningsRepository,
        analytics: Optional[AnalyticsEngine] = None,
        notifier: Optional[Notifier] = None,
    ):
        self.repository = repository
        self.store = repository.store
        self.analytics = analytics or AnalyticsEngine(repository)
        self.notifier = notifier or LogNotifier()

    def _present(self, achievement: AchievementDefinition, unlocked: bool) -> AchievementDefinition:
        """Copy of a definition with its flag set and the description in the profile currency."""
        description = achievement.description.format(
            currency=self.store.currency(), threshold=Config.HIGH_ROLLER_THRESHOLD,
        )
        return achievement.model_copy(update={"unlocked": unlocked, "description": description})

    def monthly_goal(self) -> float:
        profile = self.store.get_profile() or {}
        return max(parse_amount(profile.get("monthlyGoal")), 0.0)

    def set_monthly_goal(self, amount: float) -> dict:
        goal = parse_amount(amount)
        if goal < 0:
            raise ValueError("Monthly goal cannot be negative")
        logger.info("Monthly goal set to %.2f", goal)
        return self.store.update_profile({"monthlyGoal": goal})

    def progress(self) -> GoalProgress:
        goal = self.monthly_goal()
        earned = self.repository.summary().monthly

        percentage = 0.0
        if goal > 0:
            percentage = round(max(min(earned / goal * 100, 100.0), 0.0), 1)

        return GoalProgress(
            goal=goal,
            earned=earned,
            remaining=max(goal - earned, 0.0),
            percentage=percentage,
            is_complete=goal > 0 and earned >= goal,
        )

    def check_achievements(self) -> List[AchievementDefinition]:
        """
        Unlock every achievement whose condition now holds.

        Returns the newly unlocked ones; each triggers exactly one notification.
        Already-unlocked achievements are skipped, so a repeat call with no
        state change unlocks nothing.
        """
        df = self.repository.frame()
        conditions = {
            "firstEarning": len(df) >= 1,
            "diversified": df["category"].dropna().nunique() >= 3,
            "goalSetter": self.monthly_goal() > 0,
            "goalCrusher": self.progress().is_complete,
            "onFire": self.analytics.streak() >= Config.STREAK_TARGET,
            "highRoller": bool((df["amount"] >= Config.HIGH_ROLLER_THRESHOLD).any()),
        }

        unlocked = []
        for achievement_id, met in conditions.items():
            if met and self.store.unlock_achievement(achievement_id):
                unlocked.append(self._present(ACHIEVEMENTS[achievement_id], True))

        for achievement in unlocked:
            logger.info("Achievement unlocked: %s", achievement.id)
            self.notifier.show(f"Achievement Unlocked: {achievement.title}!", "success", achievement.icon)
        return unlocked

    def achievement_board(self) -> List[AchievementDefinition]:
        """All achievements in display order with their unlocked flag."""
        flags = self.store.get_achievements() or {}
        return [self._present(a, bool(flags.get(a.id))) for a in ACHIEVEMENTS.values()]

    def tips(self) -> List[str]:
        profile = self.store.get_profile() or {}
        occupation = profile.get("occupation")
        tips = list(OCCUPATION_TIPS.get(occupation, [])) if isinstance(occupation, str) else []
        tips.extend(GENERAL_TIPS[:3])
        return tips[:MAX_TIPS]

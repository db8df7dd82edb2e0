"""Pydantic models for the stored entities and the dashboard-facing outputs.

Stored records keep the camelCase keys the dashboard has always persisted;
the Python attributes are snake_case with camelCase aliases, so
``model_dump(by_alias=True)`` reproduces the exact shapes the UI layer reads.
"""

import datetime as dt
from typing import Dict, Literal, Optional, get_args

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

Category = Literal["cashback", "referral", "freelance", "salary", "business", "passive"]
Occupation = Literal["student", "freelancer", "employee", "business", "other"]
Theme = Literal["light", "dark"]

CATEGORIES = get_args(Category)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Inputs ---

class EarningCreate(CamelModel):
    amount: float = Field(..., gt=0, allow_inf_nan=False, description="Earned amount; zero counts as missing")
    category: Category
    date: dt.date
    source: str = ""
    notes: str = ""

    @field_validator("source", "notes", mode="before")
    @classmethod
    def _blank_if_none(cls, value):
        return "" if value is None else value


# --- Singletons ---

class Profile(CamelModel):
    name: str = ""
    username: str = ""
    email: str = ""
    mobile: str = ""
    currency: str = "₹"
    occupation: Occupation = "student"
    monthly_goal: float = Field(0, ge=0)
    avatar: str = ""
    created_at: str = ""
    verified: bool = False


class Settings(CamelModel):
    theme: Theme = "light"
    notifications: bool = True


class Achievements(CamelModel):
    first_earning: bool = False
    diversified: bool = False
    goal_setter: bool = False
    goal_crusher: bool = False
    on_fire: bool = False
    high_roller: bool = False


# --- Outputs ---

class Summary(CamelModel):
    total: float = 0.0
    weekly: float = 0.0
    weekly_count: int = 0
    monthly: float = 0.0
    monthly_count: int = 0
    last_month: float = 0.0
    trend: str = "0.0"


class MonthBucket(BaseModel):
    label: str
    total: float = 0.0


class AnalyticsReport(CamelModel):
    total_entries: int = 0
    total_amount: float = 0.0
    monthly_total: float = 0.0
    avg_daily: float = 0.0
    top_source: Optional[str] = None
    top_source_amount: float = 0.0
    best_day: Optional[str] = None
    best_day_amount: float = 0.0
    by_source: Dict[str, float] = Field(default_factory=dict)


class Insight(BaseModel):
    icon: str
    text: str


class GoalProgress(CamelModel):
    goal: float = 0.0
    earned: float = 0.0
    remaining: float = 0.0
    percentage: float = 0.0
    is_complete: bool = False


class AchievementDefinition(BaseModel):
    id: str
    icon: str
    title: str
    description: str
    unlocked: bool = False

"""
Goal Model

A goal is a persisted per-user target. The engine only ever touches its
current_net_worth field; everything else belongs to whoever created it.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


class Goal(BaseModel):
    """The active net worth goal for one user."""
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)
    
    goal_id: UUID = Field(
        default_factory=uuid4,
        description="Unique goal ID"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Goal name"
    )
    target_amount: Decimal = Field(
        ...,
        ge=0,
        description="Net worth the user is aiming for"
    )
    current_net_worth: Decimal = Field(
        default=Decimal("0"),
        description="Latest net worth pushed by the engine"
    )
    target_date: Optional[date] = None
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    
    @property
    def progress(self) -> float:
        """Fraction of the target reached, clamped to [0, 1]."""
        if self.target_amount == 0:
            return 1.0
        ratio = float(self.current_net_worth / self.target_amount)
        return max(0.0, min(1.0, ratio))
    
    def with_net_worth(self, net_worth: Decimal) -> "Goal":
        """Copy of this goal carrying a new current net worth."""
        return self.model_copy(
            update={
                "current_net_worth": net_worth,
                "updated_at": datetime.now(timezone.utc),
            }
        )

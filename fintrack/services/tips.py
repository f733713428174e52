"""
Money Tips

A fixed set of short budgeting tips, one shown at random per request.
"""

import random
from typing import Optional, Sequence


DEFAULT_TIPS = (
    "Remember to track your expenses daily!",
    "Set a budget for the categories you overspend on most.",
    "Review last month's summary before planning this month.",
    "Cook at home a few more times a week; groceries beat takeaway.",
    "Public transport passes often pay for themselves within a month.",
    "Wait a day before any unplanned purchase over your usual spend.",
    "Put part of every income into savings before spending the rest.",
    "Cancel subscriptions you have not used in the last month.",
)


class TipsProvider:
    """Returns a random tip."""

    def __init__(
        self,
        tips: Optional[Sequence[str]] = None,
        rng: Optional[random.Random] = None,
    ):
        self._tips = tuple(tips) if tips is not None else DEFAULT_TIPS
        if not self._tips:
            raise ValueError("tips should not be empty")
        self._rng = rng or random.Random()

    def __len__(self) -> int:
        return len(self._tips)

    def random_tip(self) -> str:
        return self._rng.choice(self._tips)

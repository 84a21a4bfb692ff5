# backend/dca_tracker/services/analytics/goals.py
"""
Goal progress tracking.

Formulas:
    progress_percent   = min(100, current / target * 100)   (0 when target is 0)
    remaining_quantity = max(0, target - current)
    days_remaining     = ceil((deadline - now) / 1 day)     (None without deadline)

A goal is complete when progress reaches 100, and overdue when it has a
deadline in the past and is not complete.

"now" may be a date or a datetime. With a date the day count is exact;
with a datetime the deadline is taken as midnight at the start of the
deadline day, and partial days round up.
"""

import math
from collections.abc import Iterable
from datetime import date, datetime, time
from decimal import Decimal

from dca_tracker.services.analytics.types import Goal, GoalProgress, to_decimal
from dca_tracker.services.constants import HUNDRED, ZERO

_SECONDS_PER_DAY = 86400


def calculate_days_remaining(deadline: date | None, now: date | datetime) -> int | None:
    """
    Signed number of days until the deadline.

    Returns:
        Days remaining (negative = deadline passed), or None without a deadline
    """
    if deadline is None:
        return None

    if isinstance(now, datetime):
        deadline_start = datetime.combine(deadline, time.min, tzinfo=now.tzinfo)
        return math.ceil((deadline_start - now).total_seconds() / _SECONDS_PER_DAY)

    return (deadline - now).days


def calculate_goal_progress(
        goal: Goal,
        current_quantity: Decimal,
        now: date | datetime,
) -> GoalProgress:
    """
    Map current holdings to progress towards a goal.

    Args:
        goal: Goal to evaluate
        current_quantity: Units currently held (e.g. AggregateStats.total_quantity)
        now: Evaluation date or datetime

    Returns:
        GoalProgress
    """
    quantity = to_decimal(current_quantity)
    target = goal.target_quantity

    if target == ZERO:
        progress = ZERO
    else:
        progress = min(HUNDRED, quantity / target * HUNDRED)

    days_remaining = calculate_days_remaining(goal.deadline, now)
    is_complete = progress >= HUNDRED

    return GoalProgress(
        goal=goal,
        current_quantity=quantity,
        progress_percent=progress,
        remaining_quantity=max(ZERO, target - quantity),
        days_remaining=days_remaining,
        is_complete=is_complete,
        is_overdue=days_remaining is not None and days_remaining < 0 and not is_complete,
    )


def track_goals(
        goals: Iterable[Goal],
        current_quantity: Decimal,
        now: date | datetime,
) -> list[GoalProgress]:
    """Evaluate several goals against the same holdings, preserving order."""
    return [calculate_goal_progress(goal, current_quantity, now) for goal in goals]

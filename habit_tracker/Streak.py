import logging
from collections import namedtuple
from datetime import date, timedelta

logger = logging.getLogger(__name__)

MILESTONES = (5, 10, 15, 20, 25, 30)
MILESTONE_MESSAGE = "Milestone reached! Keep the streak going."
FULL_MONTH_MESSAGE = "Full month completed!"

Celebration = namedtuple("Celebration", ["habit_title", "streak_length", "message"])

ONE_DAY = timedelta(days=1)


def milestones_for(days_in_month):
    # A set so a 30-day month does not fire twice
    return frozenset(MILESTONES) | {days_in_month}


def calculate_streak(completed_dates, toggled_date):
    """Length of the run of consecutive days that contains toggled_date."""
    dates = set(completed_dates)
    dates.add(toggled_date)
    backward = 0
    day = toggled_date
    while day > date.min and day - ONE_DAY in dates:
        backward += 1
        day -= ONE_DAY
    forward = 0
    day = toggled_date
    while day < date.max and day + ONE_DAY in dates:
        forward += 1
        day += ONE_DAY
    return 1 + backward + forward


def detect_celebration(habit, logs, toggled_date, window):
    """Celebration for a log just added on toggled_date, or None.

    Only logs inside the month window are consulted, so a run that started in
    the previous month is counted from the first of this month.
    """
    # Import here to avoid circular imports at module load time
    from .metrics import as_date

    toggled_date = as_date(toggled_date)
    completed = set()
    for log in logs:
        day = as_date(log.completed_date)
        if log.habit_id == habit.id and window.first_day <= day <= window.last_day:
            completed.add(day)
    streak = calculate_streak(completed, toggled_date)
    if streak not in milestones_for(window.days_in_month):
        logger.debug(f"Streak of {streak} for habit {habit.id} is not a milestone")
        return None
    message = FULL_MONTH_MESSAGE if streak >= window.days_in_month else MILESTONE_MESSAGE
    logger.info(f"Milestone streak of {streak} days for habit {habit.id}")
    return Celebration(habit.title, streak, message)

import calendar
import logging
import math
from collections import namedtuple
from datetime import date, datetime, timedelta

from .Streak import detect_celebration

logger = logging.getLogger(__name__)

MOMENTUM_DAYS = 3

HabitSnapshot = namedtuple("HabitSnapshot", ["id", "title", "goal"])
LogSnapshot = namedtuple("LogSnapshot", ["habit_id", "completed_date"])
HabitProgress = namedtuple("HabitProgress", ["habit_id", "title", "goal", "completions", "progress"])


class MonthWindow(namedtuple("MonthWindow", ["year", "month", "days"])):
    __slots__ = ()

    @property
    def days_in_month(self):
        return len(self.days)

    @property
    def first_day(self):
        return self.days[0]

    @property
    def last_day(self):
        return self.days[-1]

    def contains(self, day):
        return self.first_day <= day <= self.last_day

    def to_dict(self):
        return {
            "year": self.year,
            "month": self.month,
            "days_in_month": self.days_in_month,
            "first_day": self.first_day.isoformat(),
            "last_day": self.last_day.isoformat(),
            "days": [day.isoformat() for day in self.days],
        }


class MonthlyMetrics(namedtuple("MonthlyMetrics", [
    "month_window", "daily_counts", "per_habit_progress", "success_rate",
    "clamped_success_rate", "normalized_progress", "momentum",
    "total_possible", "total_completed", "celebration",
])):
    __slots__ = ()

    def to_dict(self):
        return {
            "month_window": self.month_window.to_dict(),
            "daily_counts": [
                {"date": day.isoformat(), "day": day.day, "count": count}
                for day, count in zip(self.month_window.days, self.daily_counts)
            ],
            "per_habit_progress": [progress._asdict() for progress in self.per_habit_progress],
            "success_rate": self.success_rate,
            "clamped_success_rate": self.clamped_success_rate,
            "normalized_progress": self.normalized_progress,
            "momentum": self.momentum,
            "total_possible": self.total_possible,
            "total_completed": self.total_completed,
            "celebration": self.celebration._asdict() if self.celebration else None,
        }


def month_window_for(year, month):
    days_in_month = calendar.monthrange(year, month)[1]
    first = date(year, month, 1)
    return MonthWindow(year, month, tuple(first + timedelta(days=i) for i in range(days_in_month)))


def build_month_window(reference_date):
    return month_window_for(reference_date.year, reference_date.month)


def shift_month(year, month, delta):
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def round_half_up(value):
    return int(math.floor(value + 0.5))


def as_date(value):
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str):
        return date.fromisoformat(value[:10])
    return value


def completed_pairs(logs, window, habit_ids=None):
    """Distinct (habit_id, date) pairs that fall inside the window.

    The store does not enforce one log per habit and day, so duplicates are
    collapsed here. Logs dated outside the window, or belonging to habits not
    in habit_ids, are dropped.
    """
    pairs = set()
    for log in logs:
        day = as_date(log.completed_date)
        if not window.contains(day):
            continue
        if habit_ids is not None and log.habit_id not in habit_ids:
            continue
        pairs.add((log.habit_id, day))
    return pairs


def daily_counts(window, logs, habit_ids=None):
    by_day = dict.fromkeys(window.days, 0)
    for _, day in completed_pairs(logs, window, habit_ids):
        by_day[day] += 1
    return [by_day[day] for day in window.days]


def _goal(habit):
    return habit.goal if habit.goal and habit.goal > 0 else 0


def habit_progress(habit, logs, window):
    completions = len(completed_pairs(logs, window, {habit.id}))
    goal = _goal(habit)
    if goal <= 0:
        return 0
    return round_half_up(min(completions / goal, 1) * 100)


def per_habit_progress(habits, logs, window):
    completions = {}
    for habit_id, _ in completed_pairs(logs, window):
        completions[habit_id] = completions.get(habit_id, 0) + 1
    result = []
    for habit in habits:
        count = completions.get(habit.id, 0)
        goal = _goal(habit)
        progress = round_half_up(min(count / goal, 1) * 100) if goal > 0 else 0
        result.append(HabitProgress(habit.id, habit.title, habit.goal, count, progress))
    return result


def total_possible(habits):
    return sum(_goal(habit) for habit in habits)


def success_rates(total_completed, possible):
    # Raw rate may exceed 100 when goals are overshot
    if possible <= 0:
        return 0, 0
    raw = round_half_up(total_completed / possible * 100)
    return raw, min(raw, 100)


def days_passed(window, today):
    return sum(1 for day in window.days if day <= today) or 1


def normalized_progress(total_completed, possible, window, today):
    expected = possible * (days_passed(window, today) / window.days_in_month)
    if expected <= 0:
        return 0
    return round_half_up(min(total_completed / expected, 1) * 100)


def momentum(window, counts, habit_count, today):
    recent = [count for day, count in zip(window.days, counts) if day <= today][-MOMENTUM_DAYS:]
    max_possible = habit_count * MOMENTUM_DAYS
    if max_possible <= 0:
        return 0
    return max(0, min(round_half_up(sum(recent) / max_possible * 100), 100))


def compute_metrics(habits, logs, today, year, month, toggled=None):
    # toggled: (habit_id, date) of a log just added, checked for a milestone streak
    habits = list(habits)
    logs = [LogSnapshot(log.habit_id, as_date(log.completed_date)) for log in logs]
    today = as_date(today)
    window = month_window_for(year, month)
    habit_ids = {habit.id for habit in habits}

    counts = daily_counts(window, logs, habit_ids)
    completed = sum(counts)
    possible = total_possible(habits)
    raw_rate, clamped_rate = success_rates(completed, possible)

    celebration = None
    if toggled is not None:
        habit_id, toggled_date = toggled
        toggled_date = as_date(toggled_date)
        habit = next((h for h in habits if h.id == habit_id), None)
        if habit is not None and window.contains(toggled_date):
            celebration = detect_celebration(habit, logs, toggled_date, window)

    metrics = MonthlyMetrics(
        month_window=window,
        daily_counts=counts,
        per_habit_progress=per_habit_progress(habits, logs, window),
        success_rate=raw_rate,
        clamped_success_rate=clamped_rate,
        normalized_progress=normalized_progress(completed, possible, window, today),
        momentum=momentum(window, counts, len(habits), today),
        total_possible=possible,
        total_completed=completed,
        celebration=celebration,
    )
    logger.debug(
        f"Metrics for {year}-{month:02d}: {completed}/{possible} completed, "
        f"normalized {metrics.normalized_progress}%, momentum {metrics.momentum}%"
    )
    return metrics

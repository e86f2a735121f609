from datetime import date
import logging

from flask import request, jsonify
from sqlalchemy.exc import SQLAlchemyError

from . import app
from .Authentication import token_required
from .metrics import compute_metrics, month_window_for, shift_month
from .models import Habit, HabitLog

logger = logging.getLogger(__name__)


def parse_month(args, today):
    year = int(args.get("year", today.year))
    month = int(args.get("month", today.month))
    if not 1 <= month <= 12:
        raise ValueError(f"month out of range: {month}")
    if not 1 <= year <= 9999:
        raise ValueError(f"year out of range: {year}")
    return year, month


def month_metrics(user_id, year, month, today, toggled=None):
    habits = Habit.query.filter_by(user_id=user_id).order_by(Habit.created_at, Habit.id).all()
    window = month_window_for(year, month)
    logs = HabitLog.query.filter(
        HabitLog.user_id == user_id,
        HabitLog.completed_date >= window.first_day,
        HabitLog.completed_date <= window.last_day
    ).all()
    logger.debug(f"Loaded {len(habits)} habits and {len(logs)} logs for {year}-{month:02d}")
    return habits, compute_metrics(habits, logs, today, year, month, toggled=toggled)


@app.route("/api/dashboard", methods=["GET"])
@token_required
def get_dashboard(user_id):
    today = date.today()
    try:
        year, month = parse_month(request.args, today)
    except ValueError as e:
        logger.error(f"Invalid month requested: {str(e)}")
        return jsonify({"message": "Year and month must be a valid calendar month"}), 400
    try:
        habits, metrics = month_metrics(user_id, year, month, today)
    except SQLAlchemyError as e:
        logger.error(f"Database error fetching dashboard: {str(e)}")
        return jsonify({"message": "Failed to fetch dashboard"}), 500

    previous_year, previous_month = shift_month(year, month, -1)
    next_year, next_month = shift_month(year, month, 1)
    payload = metrics.to_dict()
    payload.update({
        "habits": [habit.to_dict() for habit in habits],
        "today": today.isoformat(),
        "previous": {"year": previous_year, "month": previous_month},
        "next": {"year": next_year, "month": next_month},
    })
    return jsonify(payload), 200

from datetime import date
import logging

from flask import request, jsonify
from sqlalchemy.exc import SQLAlchemyError

from . import app, db
from .Analysis import month_metrics
from .Authentication import token_required
from .models import Habit, HabitLog

logger = logging.getLogger(__name__)

COLORS = ["#2dd4bf", "#818cf8", "#facc15", "#f87171", "#4ade80", "#fb923c", "#e879f9"]
DEFAULT_GOAL = 10


def parse_goal(value):
    try:
        return int(value) or DEFAULT_GOAL
    except (TypeError, ValueError, OverflowError):
        return DEFAULT_GOAL


def parse_date(value, default=None):
    if value is None or value == "":
        return default
    return date.fromisoformat(str(value))


def owned_habit(user_id, id):
    """(habit, error_response); exactly one of them is None."""
    habit = db.session.get(Habit, id)
    if habit is None:
        return None, (jsonify({"message": "Habit not found"}), 404)
    if habit.user_id != user_id:
        logger.error(f"Unauthorized access to habit {id} by user {user_id}")
        return None, (jsonify({"message": "Unauthorized"}), 403)
    return habit, None


@app.route("/api/habits", methods=["GET"])
@token_required
def get_habits(user_id):
    try:
        habits = Habit.query.filter_by(user_id=user_id).order_by(Habit.created_at, Habit.id).all()
        logger.debug(f"Fetched {len(habits)} habits for user {user_id}")
        return jsonify([habit.to_dict() for habit in habits]), 200
    except SQLAlchemyError as e:
        logger.error(f"Database error fetching habits: {str(e)}")
        return jsonify({"message": "Failed to fetch habits"}), 500


@app.route("/api/habits", methods=["POST"])
@token_required
def create_habit(user_id):
    data = request.get_json(silent=True) or {}
    logger.debug(f"Create habit payload: {data}")
    title = str(data.get("title") or "").strip()
    if not title:
        logger.error("Missing habit title")
        return jsonify({"message": "Title required"}), 400
    goal = parse_goal(data.get("goal"))
    try:
        existing = Habit.query.filter_by(user_id=user_id).count()
        new_habit = Habit(title=title, goal=goal, color=COLORS[existing % len(COLORS)], user_id=user_id)
        db.session.add(new_habit)
        db.session.commit()
        logger.info(f"Habit created: {title} (goal {goal}) for user {user_id}")
        return jsonify(new_habit.to_dict()), 201
    except SQLAlchemyError as e:
        logger.error(f"Database error creating habit: {str(e)}")
        db.session.rollback()
        return jsonify({"message": "Failed to create habit"}), 500


@app.route("/api/habits/<int:id>", methods=["DELETE"])
@token_required
def delete_habit(user_id, id):
    habit, error = owned_habit(user_id, id)
    if error:
        return error
    try:
        db.session.delete(habit)
        db.session.commit()
        logger.info(f"Habit {id} and its history deleted by user {user_id}")
        return jsonify({"message": "Habit deleted"}), 200
    except SQLAlchemyError as e:
        logger.error(f"Error deleting habit {id}: {str(e)}")
        db.session.rollback()
        return jsonify({"message": "Failed to delete habit"}), 500


@app.route("/api/habits/<int:id>/logs", methods=["GET"])
@token_required
def get_logs(user_id, id):
    habit, error = owned_habit(user_id, id)
    if error:
        return error
    try:
        start = parse_date(request.args.get("start"))
        end = parse_date(request.args.get("end"))
    except ValueError:
        return jsonify({"message": "Dates must be YYYY-MM-DD"}), 400
    try:
        query = HabitLog.query.filter(HabitLog.habit_id == habit.id)
        if start:
            query = query.filter(HabitLog.completed_date >= start)
        if end:
            query = query.filter(HabitLog.completed_date <= end)
        logs = query.order_by(HabitLog.completed_date).all()
        logger.debug(f"Fetched {len(logs)} logs for habit {id}")
        return jsonify([log.to_dict() for log in logs]), 200
    except SQLAlchemyError as e:
        logger.error(f"Database error fetching logs: {str(e)}")
        return jsonify({"message": "Failed to fetch logs"}), 500


@app.route("/api/habits/<int:id>/toggle", methods=["POST"])
@token_required
def toggle_log(user_id, id):
    habit, error = owned_habit(user_id, id)
    if error:
        return error
    data = request.get_json(silent=True) or {}
    today = date.today()
    try:
        day = parse_date(data.get("date"), default=today)
    except ValueError:
        return jsonify({"message": "Date must be YYYY-MM-DD"}), 400
    try:
        existing = HabitLog.query.filter_by(habit_id=habit.id, completed_date=day).all()
        if existing:
            # Duplicates may exist; unchecking clears the day
            for log in existing:
                db.session.delete(log)
            db.session.commit()
            logger.info(f"Habit {id} unchecked for {day} by user {user_id}")
            toggled = None
        else:
            db.session.add(HabitLog(habit_id=habit.id, user_id=user_id, completed_date=day))
            db.session.commit()
            logger.info(f"Habit {id} checked for {day} by user {user_id}")
            toggled = (habit.id, day)
    except SQLAlchemyError as e:
        logger.error(f"Database error toggling log: {str(e)}")
        db.session.rollback()
        return jsonify({"message": "Failed to update log"}), 500
    try:
        _, metrics = month_metrics(user_id, day.year, day.month, today, toggled=toggled)
    except SQLAlchemyError as e:
        logger.error(f"Database error recomputing metrics after toggle: {str(e)}")
        return jsonify({"message": "Log updated but metrics could not be refreshed"}), 500

    payload = metrics.to_dict()
    return jsonify({
        "completed": toggled is not None,
        "date": day.isoformat(),
        "celebration": payload["celebration"],
        "metrics": payload,
    }), 201 if toggled else 200

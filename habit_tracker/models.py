from datetime import datetime

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()

class Habit(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    goal = db.Column(db.Integer, nullable=False, default=10)  # target completions per month
    color = db.Column(db.String(20), nullable=False)
    user_id = db.Column(db.String(64), nullable=False, index=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    logs = db.relationship("HabitLog", backref="habit", lazy=True, cascade="all, delete-orphan")

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "goal": self.goal,
            "color": self.color,
            "created_at": self.created_at.isoformat(),
        }

class HabitLog(db.Model):
    __tablename__ = "habit_log"

    id = db.Column(db.Integer, primary_key=True)
    habit_id = db.Column(db.Integer, db.ForeignKey("habit.id"), nullable=False, index=True)
    user_id = db.Column(db.String(64), nullable=False, index=True)
    completed_date = db.Column(db.Date, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "habit_id": self.habit_id,
            "completed_date": self.completed_date.isoformat(),
        }

from habit_tracker import app
from habit_tracker.migrate import prepare_database

if __name__ == "__main__":
    if prepare_database(app):
        app.run(host="0.0.0.0", port=app.config["PORT"])

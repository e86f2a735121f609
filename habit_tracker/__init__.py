import logging

from flask import Flask, jsonify
from flask_cors import CORS
from flask_migrate import Migrate

from .config import Config
from .models import db

logging.basicConfig(level=Config.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config.from_object(Config)
CORS(app, resources={
    r"/api/*": {
        "origins": [Config.FRONTEND_URL],
        "methods": ["GET", "POST", "DELETE", "OPTIONS"],
        "allow_headers": ["Authorization", "Content-Type"],
        "supports_credentials": True,
    }
})
db.init_app(app)
migrate = Migrate(app, db)


@app.route("/api/health", methods=["GET"])
def health():
    return jsonify({"status": "ok"}), 200


# Route modules need app and db from above
from . import Habit, Analysis  # noqa: E402,F401

# app.py
import logging
import os

from flask import Flask, jsonify
from flask_cors import CORS
from dotenv import load_dotenv

# .env 要先于 Config 读取
load_dotenv()

from config import Config, INSTANCE_DIR
from extensions import db, jwt, migrate

# ---- 导入各个蓝图 ----
from routes.auth import auth_bp
from routes.users import users_bp
from routes.clubs import clubs_bp
from routes.reviews import reviews_bp
from routes.applications import applications_bp
from routes.stats import stats_bp
from routes.payments import payments_bp
from commands import register_commands


def _setup_logging(level_name: str):
    level = getattr(logging, str(level_name).upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _register_jwt_handlers():
    # 与前端约定：没带 token -> 401，token 无效/过期 -> 403
    @jwt.unauthorized_loader
    def _missing_token(reason):
        return jsonify({"message": "Unauthorized"}), 401

    @jwt.invalid_token_loader
    def _invalid_token(reason):
        return jsonify({"message": "Forbidden"}), 403

    @jwt.expired_token_loader
    def _expired_token(jwt_header, jwt_payload):
        return jsonify({"message": "Forbidden"}), 403


def create_app(overrides=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    _setup_logging(app.config.get("LOG_LEVEL", "INFO"))
    if app.config["SQLALCHEMY_DATABASE_URI"].startswith("sqlite:///"):
        os.makedirs(INSTANCE_DIR, exist_ok=True)  # 确保目录存在

    # ---- 初始化扩展 ----
    db.init_app(app)
    from models.user import User  # noqa: F401
    from models.club import Club  # noqa: F401
    from models.application import Application  # noqa: F401
    from models.review import Review  # noqa: F401
    from models.payment import Payment  # noqa: F401

    jwt.init_app(app)
    _register_jwt_handlers()
    migrate.init_app(app, db)

    # ---- CORS ----
    CORS(
        app,
        resources={
            r"/*": {
                "origins": app.config["CORS_ORIGINS"],
                "supports_credentials": True,
                "allow_headers": ["Content-Type", "Authorization"],
                "methods": ["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            }
        },
    )

    # ---- 注册蓝图 ----
    app.register_blueprint(auth_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(clubs_bp)
    app.register_blueprint(reviews_bp)
    app.register_blueprint(applications_bp)
    app.register_blueprint(stats_bp)
    app.register_blueprint(payments_bp)

    register_commands(app)

    # ---- 健康检查 ----
    @app.get("/")
    def health():
        return jsonify({"status": "ok"})

    return app


if __name__ == "__main__":
    create_app().run(port=int(os.getenv("PORT", 3000)))

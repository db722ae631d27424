# backend/office_beverages/__init__.py
import os

from flask import Flask, request
from sqlalchemy import event

from .config import Config
from .extensions import db, migrate
from .services.notification_hub import NotificationHub
from .services.notification_service import HUB_EXTENSION_KEY


def _enable_sqlite_fk(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_app(test_config: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)

    # Overrides must land before extensions bind their engines
    if test_config:
        app.config.update(test_config)

    os.makedirs(app.instance_path, exist_ok=True)
    app.logger.setLevel(app.config["LOG_LEVEL"])

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    with app.app_context():
        if db.engine.dialect.name == "sqlite":
            event.listen(db.engine, "connect", _enable_sqlite_fk)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Register blueprints
    from .routes.system import system_bp
    from .routes.auth import auth_bp
    from .routes.users import users_bp
    from .routes.beverages import beverages_bp
    from .routes.orders import orders_bp
    from .routes.ratings import ratings_bp
    from .routes.favorites import favorites_bp
    from .routes.reports import reports_bp
    from .routes.notifications import notifications_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(beverages_bp)
    app.register_blueprint(orders_bp)
    app.register_blueprint(ratings_bp)
    app.register_blueprint(favorites_bp)
    app.register_blueprint(reports_bp)
    app.register_blueprint(notifications_bp)

    from .errors import register_error_handlers
    register_error_handlers(app)

    allowed_origins = app.config["CORS_ORIGINS"]

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        if origin in allowed_origins:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,PATCH,OPTIONS"
        return response

    # Live notifications
    hub = NotificationHub(
        queue_size=app.config["NOTIFICATION_QUEUE_SIZE"],
        logger=app.logger,
    )
    hub.start()
    app.extensions[HUB_EXTENSION_KEY] = hub

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    app.logger.info("Office beverages API initialized")
    return app

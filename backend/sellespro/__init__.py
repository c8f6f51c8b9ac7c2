# backend/sellespro/__init__.py
from flask import Flask, request

from .config import Config
from .extensions import db, migrate, state_store


def create_app(test_config: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    state_store.init_app(app)

    # Import the snapshot model so Alembic can discover metadata reliably
    from .models import snapshot  # noqa: F401

    # Register blueprints
    from .routes.system import system_bp
    from .routes.auth import auth_bp
    from .routes.shifts import shifts_bp
    from .routes.products import products_bp
    from .routes.sales import sales_bp
    from .routes.reports import reports_bp
    from .routes.users import users_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(shifts_bp)
    app.register_blueprint(products_bp)
    app.register_blueprint(sales_bp)
    app.register_blueprint(reports_bp)
    app.register_blueprint(users_bp)

    allowed_origins = frozenset(app.config.get("CORS_ORIGINS", ()))

    @app.after_request
    def allow_register_client(response):
        origin = request.headers.get("Origin")
        if origin and origin in allowed_origins:
            response.headers.update({
                "Access-Control-Allow-Origin": origin,
                "Access-Control-Allow-Credentials": "true",
                "Access-Control-Allow-Headers": "Content-Type",
                "Access-Control-Allow-Methods": "GET,POST,PUT,DELETE,OPTIONS",
            })
            response.vary.add("Origin")
        return response

    if app.config.get("CREATE_SCHEMA_ON_STARTUP"):
        with app.app_context():
            db.create_all()

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app

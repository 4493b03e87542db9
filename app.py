"""Flask application factory for the constituency work tracker."""
import os
from typing import Optional

from flask import Flask, jsonify, request
from sqlalchemy import create_engine, text
from sqlalchemy.engine.url import make_url
from sqlalchemy.exc import OperationalError
from dotenv import load_dotenv

from extensions import csrf, db, migrate, login_manager
from utils.logger import init_logging
from utils.security import apply_security_headers


def register_error_handlers(app: Flask) -> None:
    def _error(code: str, message: str, status: int):
        return jsonify({"error": {"code": code, "message": message}}), status

    @app.errorhandler(400)
    def bad_request(error):
        return _error("bad_request", getattr(error, "description", "Bad request"), 400)

    @app.errorhandler(403)
    def forbidden(error):
        app.logger.warning("403 Forbidden", extra={"path": request.path, "method": request.method})
        return _error("forbidden", "You do not have access to this resource.", 403)

    @app.errorhandler(404)
    def not_found_error(error):
        app.logger.warning("404 Not Found", extra={"path": request.path, "method": request.method})
        return _error("not_found", "The requested resource was not found.", 404)

    @app.errorhandler(405)
    def method_not_allowed(error):
        return _error("method_not_allowed", "Method not allowed.", 405)

    @app.errorhandler(500)
    def internal_error(error):
        app.logger.exception("500 Internal Server Error")
        return _error("internal_error", "Something went wrong. Please try again.", 500)


def ensure_default_admin(app: Flask) -> None:
    """Seed an admin account from config so the portal can be used without self-registration."""
    from models import User  # Local import to avoid circular dependency

    admin_email = (app.config.get("DEFAULT_ADMIN_EMAIL") or "").lower().strip()
    admin_password = app.config.get("DEFAULT_ADMIN_PASSWORD") or ""
    if not admin_email or not admin_password:
        return

    admin_user = User.query.filter_by(email=admin_email).first()
    if admin_user:
        if admin_user.role != "admin" or not admin_user.is_active:
            admin_user.role = "admin"
            admin_user.is_active = True
            db.session.commit()
        return

    admin_user = User(full_name="System Administrator", email=admin_email, role="admin", is_active=True)
    admin_user.set_password(admin_password)
    db.session.add(admin_user)
    db.session.commit()
    app.logger.info("Default admin created", extra={"email": admin_email})


def ensure_database_exists(database_uri: str) -> None:
    """Create the target database if it does not exist (PostgreSQL + SQLite support)."""
    url = make_url(database_uri)

    if url.drivername.startswith("sqlite"):
        if url.database and url.database != ":memory:":
            os.makedirs(os.path.dirname(url.database) or ".", exist_ok=True)
        return

    if url.drivername.startswith("postgres"):
        db_name = url.database
        admin_url = url.set(database=os.getenv("POSTGRES_DB_ADMIN", "postgres"))
        engine = create_engine(admin_url, isolation_level="AUTOCOMMIT")
        try:
            with engine.connect() as conn:
                exists = conn.execute(
                    text("SELECT 1 FROM pg_database WHERE datname = :name"), {"name": db_name}
                ).scalar()
                if not exists:
                    conn.execute(text(f'CREATE DATABASE "{db_name}"'))
        except OperationalError:
            # If we cannot connect/create, let the normal app startup fail loudly later.
            pass
        finally:
            engine.dispose()


def create_app(config_name: Optional[str] = None, overrides: Optional[dict] = None) -> Flask:
    """Application factory with environment-aware configuration."""
    load_dotenv()

    app = Flask(__name__, instance_relative_config=True)

    from config import DevelopmentConfig, ProductionConfig, TestingConfig

    config_key = (config_name or os.getenv("FLASK_CONFIG") or os.getenv("FLASK_ENV") or "production").lower()
    config_map = {
        "development": DevelopmentConfig,
        "dev": DevelopmentConfig,
        "production": ProductionConfig,
        "prod": ProductionConfig,
        "testing": TestingConfig,
        "test": TestingConfig,
    }
    config_class = config_map.get(config_key, ProductionConfig)
    app.config.from_object(config_class())

    # Optional instance-specific overrides
    app.config.from_pyfile("config.py", silent=True)
    if overrides:
        app.config.update(overrides)

    ensure_database_exists(app.config["SQLALCHEMY_DATABASE_URI"])
    os.makedirs(app.instance_path, exist_ok=True)

    init_logging(app)

    csrf.init_app(app)
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)

    @login_manager.request_loader
    def load_actor(_request):
        from utils.services import get_gateway  # Local import to avoid circular dependency

        result = get_gateway().get_current_user()
        return result.data if result.ok else None

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({"error": {"code": "unauthenticated", "message": "Your session has expired. Please log in again."}}), 401

    from routes import auth_bp, main_bp, work_records_bp

    app.register_blueprint(main_bp)
    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(work_records_bp)

    register_error_handlers(app)

    @app.after_request
    def _after_request(response):
        return apply_security_headers(response, force_https=app.config.get("PREFERRED_URL_SCHEME") == "https")

    # Ensure tables exist so first run creates the database structure automatically.
    with app.app_context():
        import models  # noqa: F401  Registers the tables on the metadata.

        db.create_all()
        ensure_default_admin(app)

    return app


if __name__ == "__main__":
    port = int(os.getenv("PORT", 5000))
    create_app().run(host="0.0.0.0", port=port, use_reloader=False)

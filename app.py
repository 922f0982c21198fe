import logging
from datetime import datetime, timezone

import click
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException
from werkzeug.middleware.proxy_fix import ProxyFix

from config import get_config
from extensions import db, migrate

logger = logging.getLogger(__name__)


def _configure_logging(app: Flask) -> None:
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    app.logger.setLevel(level)


def _register_error_handlers(app: Flask) -> None:
    from blueprints.request_utils import RequestValidationError

    @app.errorhandler(RequestValidationError)
    def handle_validation_error(error: RequestValidationError):
        return jsonify({"message": "Validation failed", "issues": error.issues}), 400

    @app.errorhandler(HTTPException)
    def handle_http_error(error: HTTPException):
        payload = {"message": error.name}
        if error.code == 401:
            payload = {"message": "Unauthorized", "detail": error.description}
        return jsonify(payload), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error: Exception):
        logger.exception("Unhandled error while serving request")
        db.session.rollback()
        return jsonify({"message": "Internal server error"}), 500


def _register_commands(app: Flask) -> None:
    @app.cli.command("recompute-baselines")
    @click.option("--user-id", required=True, help="User whose baselines to rebuild.")
    def recompute_baselines_command(user_id: str):
        """Recompute baselines and insights for one user and report timing."""
        from services.recompute_pipeline import run_recompute_pipeline

        click.echo(f"Measuring baseline recompute for user {user_id}")
        result = run_recompute_pipeline(user_id)
        click.echo(
            f"Recompute finished in {result.duration_ms}ms "
            f"({len(result.recompute.upserted)} upserted, "
            f"{len(result.recompute.deleted)} deleted)"
        )


def create_app(config_object=None):
    """Application factory for the FitForecast backend."""
    app = Flask(__name__)
    app.config.from_object(config_object or get_config())

    _configure_logging(app)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    from models import init_models

    init_models()

    # Proxy fix for production behind reverse proxies
    app.wsgi_app = ProxyFix(app.wsgi_app, x_proto=1, x_host=1)

    # Register blueprints
    from blueprints.entries.routes import entries_bp
    from blueprints.feelings.routes import feelings_bp
    from blueprints.trends.routes import trends_bp
    from blueprints.insights.routes import insights_bp

    app.register_blueprint(entries_bp, url_prefix="/entries")
    app.register_blueprint(feelings_bp, url_prefix="/entries/<entry_id>/feelings")
    app.register_blueprint(trends_bp, url_prefix="/trends")
    app.register_blueprint(insights_bp, url_prefix="/insights")

    _register_error_handlers(app)
    _register_commands(app)

    @app.route("/health")
    def health():
        return {
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    return app


if __name__ == "__main__":
    application = create_app()
    application.run(host="0.0.0.0", port=5000)

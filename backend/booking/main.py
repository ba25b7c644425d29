import logging
import os

from dotenv import load_dotenv
from flask import Flask

from booking.core.config import is_truthy

# Get logger for this module
logger = logging.getLogger(__name__)

# Only load from .env when DATABASE_URL is not already defined by the environment
if not os.getenv("DATABASE_URL"):
    load_dotenv()


def _is_test_mode(app: Flask) -> bool:
    return bool(app.config.get("TESTING")) or is_truthy(os.getenv("TESTING"))


def _init_sentry(env: str) -> None:
    sentry_dsn = os.getenv("SENTRY_DSN")
    if not sentry_dsn:
        logger.info(
            "Sentry not initialized (SENTRY_DSN not set)",
            extra={"context": {"environment": env}},
        )
        return

    import sentry_sdk
    from sentry_sdk.integrations.flask import FlaskIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

    sentry_sdk.init(
        dsn=sentry_dsn,
        environment=env,
        release=os.getenv("GIT_SHA", "unknown"),
        integrations=[FlaskIntegration(), SqlalchemyIntegration()],
        traces_sample_rate=0.1,
        send_default_pii=False,
    )
    logger.info(
        "Sentry initialized",
        extra={"context": {"environment": env, "traces_sample_rate": 0.1}},
    )


def _init_metrics(app: Flask, env: str) -> None:
    # Expose /metrics for Prometheus scraping; must run before the limiter binds
    from prometheus_flask_exporter import PrometheusMetrics

    if _is_test_mode(app):
        # Apps are created repeatedly under test; a private registry avoids
        # duplicate metric registration.
        from prometheus_client import CollectorRegistry

        metrics = PrometheusMetrics(app, registry=CollectorRegistry())
    else:
        metrics = PrometheusMetrics(app)

    try:
        metrics.info(
            "app_info",
            "Application information",
            version=os.getenv("GIT_SHA", "unknown"),
            environment=env,
        )
    except ValueError as e:
        # Metric already registered (create_app called more than once)
        logger.debug(
            "app_info metric already registered",
            extra={"context": {"error": str(e)}},
        )


def create_app(config: dict | None = None) -> Flask:
    env = os.getenv("FLASK_ENV", "development")
    is_production = env == "production"

    app = Flask(__name__)
    if is_truthy(os.getenv("TESTING")):
        app.config["TESTING"] = True
    if config:
        app.config.update(config)

    # Configure structured logging (after app creation so we can register hooks)
    from booking.core.logging_config import setup_logging

    setup_logging(
        app=app,
        log_level=logging.INFO if is_production else logging.DEBUG,
        enable_sql_echo=not is_production,  # SQL timing in dev only
        log_to_file=is_truthy(os.getenv("LOG_TO_FILE", "1"))
        and not _is_test_mode(app),
        use_json_format=is_production,
    )

    from booking.core.config import (
        load_booking_settings,
        log_booking_config,
        log_timezone_config,
    )

    log_timezone_config()
    log_booking_config(load_booking_settings())

    _init_sentry(env)
    _init_metrics(app, env)

    app.config["SECRET_KEY"] = os.getenv("FLASK_SECRET_KEY", "dev-secret-change-me")
    if is_production and app.config["SECRET_KEY"] == "dev-secret-change-me":
        raise ValueError(
            "Production deployment requires FLASK_SECRET_KEY to be set."
        )

    from booking.core.limiter_config import limiter

    # Disable rate limiting when RATE_LIMIT_ENABLED=0 (test runs)
    app.config.setdefault(
        "RATELIMIT_ENABLED", os.getenv("RATE_LIMIT_ENABLED", "1") != "0"
    )
    limiter.init_app(app)

    from booking.core.api_utils import register_error_handlers

    register_error_handlers(app)

    from booking.controllers.appointment_controller import appointments_bp
    from booking.controllers.health_controller import health_bp
    from booking.controllers.me_controller import me_bp
    from booking.controllers.seller_controller import sellers_bp

    limiter.exempt(health_bp)
    app.register_blueprint(health_bp)
    app.register_blueprint(sellers_bp)
    app.register_blueprint(me_bp)
    app.register_blueprint(appointments_bp)

    from booking.db.session import create_tables

    if _is_test_mode(app) or is_truthy(os.getenv("AUTO_CREATE_TABLES")):
        create_tables()

    logger.info(
        "Application created",
        extra={
            "context": {
                "environment": env,
                "blueprints": sorted(app.blueprints.keys()),
            }
        },
    )
    return app

import os

from services.analytics_config import DEFAULT_ANALYTICS_CONFIG


class BaseConfig:
    """Base configuration for the FitForecast backend."""

    SECRET_KEY = os.environ.get("FITFORECAST_SECRET_KEY", "dev-secret-key")
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "FITFORECAST_DATABASE_URI",
        "sqlite:///fitforecast.db",
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Fallback user for unauthenticated development flows.
    DEFAULT_USER_ID = os.environ.get("FITFORECAST_DEFAULT_USER_ID")

    LOG_LEVEL = os.environ.get("FITFORECAST_LOG_LEVEL", "INFO")

    # Recomputes slower than this are logged as warnings.
    RECOMPUTE_WARN_MS = int(os.environ.get("FITFORECAST_RECOMPUTE_WARN_MS", "5000"))
    SERIALIZE_RECOMPUTES = True

    INSIGHTS_DEFAULT_LIMIT = 5
    INSIGHTS_MAX_LIMIT = 20
    ENTRIES_DEFAULT_LIMIT = 20
    ENTRIES_MAX_LIMIT = 100

    ANALYTICS_CONFIG = DEFAULT_ANALYTICS_CONFIG


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    LOG_LEVEL = os.environ.get("FITFORECAST_LOG_LEVEL", "DEBUG")


class ProductionConfig(BaseConfig):
    DEBUG = False


class TestingConfig(BaseConfig):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    DEFAULT_USER_ID = None
    LOG_LEVEL = "DEBUG"


config_by_name = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
}


def get_config():
    """Return the appropriate config class based on FLASK_ENV."""
    env = os.environ.get("FLASK_ENV", "development").lower()
    return config_by_name.get(env, DevelopmentConfig)

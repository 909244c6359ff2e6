import os


def _default_backend():
    return "rest" if os.getenv("DATA_STORE_URL") else "sql"


class BaseConfig:
    JSON_SORT_KEYS = False
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    CORS_ALLOWED_ORIGINS = os.getenv("CORS_ALLOWED_ORIGINS", "*")
    RATELIMIT_STORAGE_URL = os.getenv("RATELIMIT_STORAGE_URL", "memory://")
    ORDER_LIMIT_PER_IP = os.getenv("ORDER_LIMIT_PER_IP", "20 per hour")
    LOGIN_LIMIT_PER_IP = os.getenv("LOGIN_LIMIT_PER_IP", "10 per 30 minutes")

    # Remote data store (PostgREST / GoTrue compatible backend)
    STORE_BACKEND = os.getenv("STORE_BACKEND", _default_backend())
    DATA_STORE_URL = os.getenv("DATA_STORE_URL")
    DATA_STORE_KEY = os.getenv("DATA_STORE_KEY")
    STORE_TIMEOUT_SECONDS = float(os.getenv("STORE_TIMEOUT_SECONDS", 10))
    STORE_READ_RETRIES = int(os.getenv("STORE_READ_RETRIES", 1))

    # Outbound notification webhook
    NOTIFICATION_WEBHOOK_URL = os.getenv("NOTIFICATION_WEBHOOK_URL")
    NOTIFICATION_TIMEOUT_SECONDS = float(os.getenv("NOTIFICATION_TIMEOUT_SECONDS", 5))

    # Access tokens are issued by the auth service; we only verify them.
    JWT_SECRET = os.getenv("JWT_SECRET", "dev-insecure-jwt-key")
    JWT_AUDIENCE = os.getenv("JWT_AUDIENCE", "authenticated")
    ACCESS_TOKEN_LIFETIME_MIN = int(os.getenv("ACCESS_TOKEN_LIFETIME_MIN", 60))
    REFRESH_TOKEN_LIFETIME_DAYS = int(os.getenv("REFRESH_TOKEN_LIFETIME_DAYS", 30))

    OTEL_ENABLED = os.getenv("OTEL_ENABLED", "1") == "1"
    OTEL_SERVICE_NAME = os.getenv("OTEL_SERVICE_NAME", "webshop-backend")
    OTEL_EXPORTER_OTLP_ENDPOINT = os.getenv(
        "OTEL_EXPORTER_OTLP_ENDPOINT", "http://localhost:4318/v1/traces"
    )


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-insecure-key")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///dev.db")


class TestingConfig(BaseConfig):
    TESTING = True
    SECRET_KEY = "test-key"
    STORE_BACKEND = "sql"
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    NOTIFICATION_WEBHOOK_URL = None
    JWT_SECRET = "test-jwt-secret"
    OTEL_ENABLED = os.getenv("OTEL_ENABLED", "0") == "1"


class ProductionConfig(BaseConfig):
    DEBUG = False
    TESTING = False
    SECRET_KEY = os.getenv("SECRET_KEY")
    STORE_BACKEND = os.getenv("STORE_BACKEND", "rest")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite://")

    @staticmethod
    def validate():
        missing = [
            key
            for key in ("DATA_STORE_URL", "DATA_STORE_KEY", "JWT_SECRET")
            if not os.getenv(key)
        ]
        if missing:
            raise RuntimeError(
                f"Missing required env vars in production: {', '.join(missing)}"
            )


def get_config_class():
    env = os.getenv("APP_ENV", "development").lower()
    if env == "production":
        ProductionConfig.validate()
        return ProductionConfig
    if env == "testing":
        return TestingConfig
    return DevelopmentConfig

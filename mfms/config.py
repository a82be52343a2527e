import os

class BaseConfig:
    # Secrets (env in prod; dev/test may use defaults)
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-not-secure")

    # Database (env in prod; dev/test may use default)
    try:
        from dotenv import dotenv_values
        _ENV_FALLBACK = dotenv_values(".env")
    except OSError:
        _ENV_FALLBACK = {}
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL") or _ENV_FALLBACK.get("DATABASE_URL") or "sqlite:///mfms.db"
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Logging / misc
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # --- Mail ---
    MAIL_SERVER = os.getenv("MAIL_SERVER", "localhost")
    MAIL_PORT = int(os.getenv("MAIL_PORT", "587"))
    MAIL_USE_TLS = (os.getenv("MAIL_USE_TLS", "true").lower() == "true")
    MAIL_USE_SSL = (os.getenv("MAIL_USE_SSL", "false").lower() == "true")
    MAIL_USERNAME = os.getenv("MAIL_USERNAME")
    MAIL_PASSWORD = os.getenv("MAIL_PASSWORD")
    MAIL_DEFAULT_SENDER = os.getenv("MAIL_DEFAULT_SENDER", "Merchant Feedback <no-reply@local.test>")
    MAIL_SUPPRESS_SEND = (os.getenv("MAIL_SUPPRESS_SEND", "false").lower() == "true")

    # --- Feedback workflow ---
    # Stored for every catalog question the employee left unanswered
    FEEDBACK_DEFAULT_ANSWER = os.getenv("FEEDBACK_DEFAULT_ANSWER", "No answer provided")
    # Request-layer precondition; the workflow itself accepts any count
    FEEDBACK_REQUIRED_ANSWERS = int(os.getenv("FEEDBACK_REQUIRED_ANSWERS", "10"))
    FEEDBACK_MAIL_SUBJECT = os.getenv("FEEDBACK_MAIL_SUBJECT", "Merchant Feedback Management System")
    FEEDBACK_FAILURE_MAIL_SUBJECT = os.getenv("FEEDBACK_FAILURE_MAIL_SUBJECT", "Feedback Creation Failed")

class DevelopmentConfig(BaseConfig):
    DEBUG = True
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "DEBUG")
    MAIL_SUPPRESS_SEND = True

class ProductionConfig(BaseConfig):
    DEBUG = False
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "WARNING")
    MAIL_SUPPRESS_SEND = False

    # Resolved lazily so importing this module never needs prod env vars;
    # create_app() fails fast when they are missing.
    SECRET_KEY = os.environ.get("SECRET_KEY")
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL")

class TestingConfig(BaseConfig):
    TESTING = True
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = os.environ.get("TEST_DATABASE_URL", "sqlite:///:memory:")
    MAIL_SUPPRESS_SEND = True

_ENV_MAP = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
}

def get_config():
    env = os.environ.get("APP_ENV", "development").lower()
    return _ENV_MAP.get(env, DevelopmentConfig)

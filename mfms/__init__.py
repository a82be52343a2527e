import os
from flask import Flask, jsonify

# Load .env only for local/dev. In prod, env vars come from the platform.
if os.getenv("APP_ENV", "development") != "production":
    from dotenv import load_dotenv
    load_dotenv(".env", override=True)


from .config import get_config
from .extensions import db, migrate, mail
from .observability import init_logging, init_sentry
from .services.errors import WorkflowError

def create_app():
    app = Flask(__name__, template_folder="templates")

    # Config: clean, explicit, class-based
    app.config.from_object(get_config())

    # --- Required env validation for prod-like envs (staging/production) ---
    def _require(name: str):
        val = os.getenv(name) or app.config.get(name)
        if not val:
            raise RuntimeError(f"Missing required environment variable: {name}")
        return val

    env_key = (os.getenv("APP_ENV", "development") or "development").lower()
    if env_key in ("staging", "production"):
        # Enforce hard requirements at startup (not at import time)
        _require("SECRET_KEY")
        _require("DATABASE_URL")
        _require("MAIL_SERVER")

    init_logging(app)
    init_sentry(app)

    # Init extensions
    db.init_app(app)
    migrate.init_app(app, db, directory="migrations")
    mail.init_app(app)

    # Make sure every table is registered on db.metadata
    from . import models  # noqa: F401

    @app.get("/healthz")
    def healthz():
        return {"status": "ok"}, 200

    # The request layer is thin and lives elsewhere; this keeps its error
    # shape consistent with the workflow taxonomy.
    @app.errorhandler(WorkflowError)
    def handle_workflow_error(e):
        app.logger.warning("workflow error %s: %s", type(e).__name__, e)
        return jsonify({"error": e.category, "detail": str(e), "code": e.http_status}), e.http_status

    @app.errorhandler(404)
    def not_found(e):
        return ("Not Found", 404)

    @app.errorhandler(500)
    def server_error(e):
        return ("Internal Server Error", 500)

    # CLI commands (ops-grade utilities)
    from .cli import register_cli
    register_cli(app)

    return app

from flask import Flask
from flasgger import Swagger
from flask_cors import CORS

from .config import get_config
from .errors import register_error_handlers
from models.db_storage import DBStorage
from models.repository import SQLSessionStore, SQLUserStore
from services.auth_service import AuthService, TokenSettings
from services.payment import PaymentService
from utils.security import PasswordHasher, TokenMaker

# Minimal Swagger config: exposes /swagger.json and UI at /apidocs
SWAGGER_TEMPLATE = {
    "swagger": "2.0.0",
    "info": {
        "title": "Orderin API",
        "version": "1.0.0",
        "description": "REST API for user accounts, sessions, carts and payments.",
    },
    "basePath": "/",  # blueprints are mounted under /api/v1
    "schemes": ["http"],
    "securityDefinitions": {
        "Bearer": {
            "type": "apiKey",
            "name": "Authorization",
            "in": "header",
            "description": "Enter the access token with the `Bearer ` prefix, e.g. \"Bearer abcde12345\"."
        }
    }
}

SWAGGER_CONFIG = {
    "headers": [],
    "specs": [
        {
            "endpoint": "apispec_1",
            "route": "/swagger.json",
            "rule_filter": lambda rule: True,   # include all endpoints
            "model_filter": lambda tag: True,   # include all models
        }
    ],
    "static_url_path": "/flasgger_static",
    "swagger_ui": True,
    "specs_route": "/apidocs/",
}


def build_auth_service(config, storage: DBStorage) -> AuthService:
    """Wire the AuthService from a config mapping and an open DBStorage."""
    session = storage.get_session()
    return AuthService(
        users=SQLUserStore(session),
        sessions=SQLSessionStore(session),
        hasher=PasswordHasher(
            time_cost=config.get("ARGON2_TIME_COST"),
            memory_cost=config.get("ARGON2_MEMORY_COST"),
            parallelism=config.get("ARGON2_PARALLELISM"),
        ),
        tokens=TokenMaker(algorithm=config["JWT_ALGORITHM"]),
        settings=TokenSettings(
            access_secret=config["TOKEN_SECRET_KEY"],
            refresh_secret=config["REFRESH_TOKEN_SECRET_KEY"],
            access_duration=config["TOKEN_DURATION"],
            refresh_duration=config["REFRESH_TOKEN_DURATION"],
        ),
        transaction=storage.transaction,
    )


def create_app(config_name: str | None = None, payment_gateways=None) -> Flask:
    """
    Application factory: creates and configures the Flask app.

    Storage, the AuthService and the PaymentService are built here and kept
    in app.extensions; blueprints look them up through current_app.
    `payment_gateways` maps PaymentProvider -> gateway instance.
    """
    app = Flask(__name__)

    # Load configuration (reads .env via get_config)
    app.config.from_object(get_config(config_name))

    # Cross-Origin Resource Sharing: enable for dev, configurable for prod
    CORS(app, resources={r"/*": {"origins": app.config.get("CORS_ORIGINS", "*")}})

    # Swagger UI and JSON
    Swagger(app, template=SWAGGER_TEMPLATE, config=SWAGGER_CONFIG)

    # Register global error handlers that return the uniform error envelope
    register_error_handlers(app)

    storage = DBStorage(app.config["DATABASE_URL"], echo=app.config.get("SQLALCHEMY_ECHO", False))
    storage.reload()
    app.extensions["storage"] = storage
    app.extensions["auth_service"] = build_auth_service(app.config, storage)
    app.extensions["payment_service"] = PaymentService(payment_gateways or {})

    from .health import bp as health_bp
    from .auth import bp as auth_bp
    from .users import bp as users_bp
    from .carts import bp as carts_bp

    app.register_blueprint(health_bp, url_prefix="/api/v1")
    app.register_blueprint(auth_bp, url_prefix="/api/v1/auth")
    app.register_blueprint(users_bp, url_prefix="/api/v1")
    app.register_blueprint(carts_bp, url_prefix="/api/v1")

    # Ensure the DB session is removed at the end of each request/app context
    @app.teardown_appcontext
    def remove_session(exception=None):
        # This calls scoped_session.remove(), preventing connection leaks
        storage.close()

    @app.route("/")
    def root():
        return {
            "message": "Welcome to Orderin API",
            "docs": "/apidocs/",
            "health": "/api/v1/health",
        }, 200

    return app

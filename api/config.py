"""
Environment-aware configuration.
Token secrets and lifetimes, database URL and argon2 cost are read from the environment (and .env) once, here.
"""
import os
from dotenv import load_dotenv
from datetime import timedelta

load_dotenv()  # Read .env if present


def _seconds(name: str, default: int) -> timedelta:
    return timedelta(seconds=int(os.getenv(name, str(default))))


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")  # Set a strong key in production
    DEBUG = False
    TESTING = False
    # CORS: in dev we usually allow '*', in prod supply a comma-separated list in env
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
    APP_ENV = os.getenv("APP_ENV", "dev")

    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///orderin.db")
    SQLALCHEMY_ECHO = _flag("SQLALCHEMY_ECHO")

    # Access and refresh tokens are signed with different secrets
    TOKEN_SECRET_KEY = os.getenv("TOKEN_SECRET_KEY", "dev-access-secret-change-me-0123456789")
    REFRESH_TOKEN_SECRET_KEY = os.getenv("REFRESH_TOKEN_SECRET_KEY", "dev-refresh-secret-change-me-012345678")
    TOKEN_DURATION = _seconds("TOKEN_DURATION_SECONDS", 15 * 60)
    REFRESH_TOKEN_DURATION = _seconds("REFRESH_TOKEN_DURATION_SECONDS", 24 * 60 * 60)
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")

    # None keeps argon2-cffi's defaults
    ARGON2_TIME_COST = int(os.getenv("ARGON2_TIME_COST")) if os.getenv("ARGON2_TIME_COST") else None
    ARGON2_MEMORY_COST = int(os.getenv("ARGON2_MEMORY_COST")) if os.getenv("ARGON2_MEMORY_COST") else None
    ARGON2_PARALLELISM = int(os.getenv("ARGON2_PARALLELISM")) if os.getenv("ARGON2_PARALLELISM") else None


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    # In dev, propagate exceptions so our error handler has full context
    PROPAGATE_EXCEPTIONS = True


class TestingConfig(BaseConfig):
    TESTING = True
    DATABASE_URL = "sqlite://"
    SQLALCHEMY_ECHO = False
    TOKEN_SECRET_KEY = "test-access-secret-0123456789abcdef"
    REFRESH_TOKEN_SECRET_KEY = "test-refresh-secret-0123456789abcdef"
    TOKEN_DURATION = timedelta(minutes=15)
    REFRESH_TOKEN_DURATION = timedelta(hours=24)
    # cheap hashing keeps the suite fast
    ARGON2_TIME_COST = 1
    ARGON2_MEMORY_COST = 8
    ARGON2_PARALLELISM = 1


class ProductionConfig(BaseConfig):
    DEBUG = False


def get_config(name: str | None):
    """
    Select config class.
    - If name is provided, choose by name.
    - Else choose based on APP_ENV (dev/test/prod).
    """
    env = (name or os.getenv("APP_ENV", "dev")).lower()
    if env in ["prod", "production"]:
        return ProductionConfig
    if env in ["test", "testing"]:
        return TestingConfig
    return DevelopmentConfig

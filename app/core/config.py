from dataclasses import dataclass, field
import os


def _as_bool(value: str) -> bool:
    return value.lower() in ("1", "true", "yes")


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass(frozen=True)
class Settings:
    db_host: str = os.getenv("DB_HOST", "")
    db_port: int = int(os.getenv("DB_PORT", "5432"))
    db_name: str = os.getenv("DB_NAME", "")
    db_user: str = os.getenv("DB_USER", "")
    db_password: str = os.getenv("DB_PASSWORD", "")
    auto_migrate: bool = _as_bool(os.getenv("AUTO_MIGRATE", "false"))
    app_version: str = "1.0.0"
    api_prefix: str = os.getenv("API_PREFIX", "/api")
    cors_allow_origins: list[str] = field(
        default_factory=lambda: _split_csv(os.getenv("CORS_ALLOW_ORIGINS", "*"))
    )
    cors_allow_methods: list[str] = field(
        default_factory=lambda: _split_csv(os.getenv("CORS_ALLOW_METHODS", "*"))
    )
    cors_allow_headers: list[str] = field(
        default_factory=lambda: _split_csv(os.getenv("CORS_ALLOW_HEADERS", "*"))
    )
    expose_errors: bool = _as_bool(os.getenv("EXPOSE_ERRORS", "true"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    jwt_secret: str = os.getenv("JWT_SECRET", "change-me-rifas-api-jwt-signing-secret")
    jwt_algorithm: str = "HS256"
    jwt_expires_minutes: int = int(os.getenv("JWT_EXPIRES_MINUTES", "1440"))
    uploads_dir: str = os.getenv("UPLOADS_DIR", "uploads")
    upload_max_bytes: int = int(os.getenv("UPLOAD_MAX_BYTES", str(5 * 1024 * 1024)))
    frontend_url: str = os.getenv("FRONTEND_URL", "http://localhost:3000")
    whatsapp_number: str = os.getenv("WHATSAPP_NUMBER", "")
    bootstrap_admin: bool = _as_bool(os.getenv("BOOTSTRAP_ADMIN", "false"))
    admin_username: str = os.getenv("ADMIN_USERNAME", "admin")
    admin_password: str = os.getenv("ADMIN_PASSWORD", "")


settings = Settings()


def db_configured() -> bool:
    return all([settings.db_host, settings.db_name, settings.db_user, settings.db_password])

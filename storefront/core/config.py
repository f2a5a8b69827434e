"""
Configuration management for the storefront backend.

Settings come from config/default.yaml, then environment variables (a .env
file in the working directory is loaded first). The resulting object is
passed explicitly to the services and the app factory.
"""
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv

load_dotenv()


def _project_root() -> Path:
    """Return project root (parent of storefront package)."""
    return Path(__file__).resolve().parent.parent.parent


DEFAULT_CONFIG_PATH = _project_root() / "config" / "default.yaml"

# Legacy carts were created with this many zeroed slots
LEGACY_CART_SLOTS = 300


@dataclass
class StorefrontConfig:
    """Configuration for the storefront service."""

    # Persistence
    database_url: str = "sqlite:///./storefront.db"

    # Session tokens
    jwt_secret: str = "change-me-storefront-secret"
    jwt_algorithm: str = "HS256"
    token_ttl_seconds: Optional[int] = 7 * 24 * 3600   # None/0 = tokens never expire

    # Credentials
    bcrypt_rounds: int = 12
    generic_login_errors: bool = False     # True = one message for wrong email and wrong password

    # Cart
    cart_slots: int = LEGACY_CART_SLOTS

    # Uploads
    upload_dir: str = "upload/images"
    public_base_url: str = "http://localhost:4000"

    # Server
    host: str = "0.0.0.0"
    port: int = 4000
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"

    @property
    def token_expires(self) -> bool:
        return bool(self.token_ttl_seconds)

    @classmethod
    def from_yaml(cls, config_path: Optional[Path] = None) -> "StorefrontConfig":
        """Load configuration from YAML file. A missing file yields defaults."""
        path = config_path or DEFAULT_CONFIG_PATH
        if not path.exists():
            return cls()

        with open(path, 'r') as f:
            data = yaml.safe_load(f) or {}

        database_config = data.get('database', {})
        auth_config = data.get('auth', {})
        cart_config = data.get('cart', {})
        uploads_config = data.get('uploads', {})
        server_config = data.get('server', {})

        defaults = cls()
        return cls(
            database_url=database_config.get('url', defaults.database_url),
            jwt_secret=auth_config.get('jwt_secret', defaults.jwt_secret),
            jwt_algorithm=auth_config.get('jwt_algorithm', defaults.jwt_algorithm),
            token_ttl_seconds=auth_config.get('token_ttl_seconds', defaults.token_ttl_seconds),
            bcrypt_rounds=auth_config.get('bcrypt_rounds', defaults.bcrypt_rounds),
            generic_login_errors=auth_config.get('generic_login_errors', defaults.generic_login_errors),
            cart_slots=cart_config.get('slots', defaults.cart_slots),
            upload_dir=uploads_config.get('dir', defaults.upload_dir),
            public_base_url=uploads_config.get('public_base_url', defaults.public_base_url),
            host=server_config.get('host', defaults.host),
            port=server_config.get('port', defaults.port),
            cors_origins=server_config.get('cors_origins', defaults.cors_origins),
            log_level=server_config.get('log_level', defaults.log_level),
        )

    def with_env(self, environ: Optional[Dict[str, str]] = None) -> "StorefrontConfig":
        """Return a copy with environment variable overrides applied."""
        env = os.environ if environ is None else environ
        overrides: Dict[str, Any] = {}

        if env.get("DATABASE_URL"):
            overrides["database_url"] = env["DATABASE_URL"]
        if env.get("STOREFRONT_JWT_SECRET"):
            overrides["jwt_secret"] = env["STOREFRONT_JWT_SECRET"]
        if env.get("STOREFRONT_JWT_ALGORITHM"):
            overrides["jwt_algorithm"] = env["STOREFRONT_JWT_ALGORITHM"]
        if env.get("STOREFRONT_TOKEN_TTL") is not None and env.get("STOREFRONT_TOKEN_TTL") != "":
            overrides["token_ttl_seconds"] = int(env["STOREFRONT_TOKEN_TTL"]) or None
        if env.get("STOREFRONT_BCRYPT_ROUNDS"):
            overrides["bcrypt_rounds"] = int(env["STOREFRONT_BCRYPT_ROUNDS"])
        if env.get("STOREFRONT_GENERIC_LOGIN_ERRORS"):
            overrides["generic_login_errors"] = env["STOREFRONT_GENERIC_LOGIN_ERRORS"].lower() in ("1", "true", "yes")
        if env.get("STOREFRONT_UPLOAD_DIR"):
            overrides["upload_dir"] = env["STOREFRONT_UPLOAD_DIR"]
        if env.get("STOREFRONT_PUBLIC_URL"):
            overrides["public_base_url"] = env["STOREFRONT_PUBLIC_URL"].rstrip("/")
        if env.get("PORT"):
            overrides["port"] = int(env["PORT"])
        if env.get("LOG_LEVEL"):
            overrides["log_level"] = env["LOG_LEVEL"].upper()

        return replace(self, **overrides)


# Global config instance
_config: Optional[StorefrontConfig] = None


def get_config() -> StorefrontConfig:
    """Get the process-wide configuration instance."""
    global _config
    if _config is None:
        _config = StorefrontConfig.from_yaml().with_env()
    return _config


def set_config(config: StorefrontConfig) -> None:
    """Set the process-wide configuration instance."""
    global _config
    _config = config

import logging
import os
from enum import Enum
from typing import List

from pydantic_settings import BaseSettings
from starlette.config import Config

logger = logging.getLogger(__name__)

current_file_dir = os.path.dirname(os.path.realpath(__file__))
project_root = os.path.abspath(os.path.join(current_file_dir, "..", "..", ".."))

env_paths = [
    "/code/.env",
    os.path.join(project_root, ".env"),
    "/.env",
]

env_path = next((path for path in env_paths if os.path.isfile(path)), None)
logger.info(f"Using environment file at: {env_path}")

config = Config(env_path)


class EnvironmentOption(str, Enum):
    """Environment options for the application."""

    PRODUCTION = "production"
    STAGING = "staging"
    DEVELOPMENT = "development"
    LOCAL = "local"


class EnvironmentSettings(BaseSettings):
    """Environment-related settings."""

    ENVIRONMENT: EnvironmentOption = config("ENVIRONMENT", default=EnvironmentOption.DEVELOPMENT, cast=EnvironmentOption)


class AuthSettings(BaseSettings):
    """Credential signing settings.

    Secrets carry no built-in default; the application refuses to start
    without them.
    """

    JWT_SECRET: str = config("JWT_SECRET", default="")
    EDITOR_JWT_SECRET: str = config("EDITOR_JWT_SECRET", default="")
    JWT_ALGORITHM: str = config("JWT_ALGORITHM", default="HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = config("ACCESS_TOKEN_EXPIRE_MINUTES", default=1440, cast=int)
    EDITOR_TOKEN_EXPIRE_MINUTES: int = config("EDITOR_TOKEN_EXPIRE_MINUTES", default=5, cast=int)
    AUTH_USERS: str = config("AUTH_USERS", default="")

    @property
    def EDITOR_SIGNING_SECRET(self) -> str:
        """Secret shared with the Document Server, falling back to JWT_SECRET."""
        return self.EDITOR_JWT_SECRET or self.JWT_SECRET


class DocumentKeySettings(BaseSettings):
    """Document key derivation settings."""

    DOC_KEY_SECRET: str = config("DOC_KEY_SECRET", default="")


class RegistrySettings(BaseSettings):
    """Document registry retention settings."""

    REGISTRY_MAX_ENTRIES: int = config("REGISTRY_MAX_ENTRIES", default=10000, cast=int)
    REGISTRY_TTL_SECONDS: int = config("REGISTRY_TTL_SECONDS", default=0, cast=int)


class StorageSettings(BaseSettings):
    """Upload storage settings."""

    UPLOAD_DIR: str = config("UPLOAD_DIR", default=os.path.join(project_root, "uploads"))
    UPLOADS_PATH: str = config("UPLOADS_PATH", default="/uploads")
    PUBLIC_BASE_URL: str = config("PUBLIC_BASE_URL", default="")
    MAX_UPLOAD_SIZE: int = config("MAX_UPLOAD_SIZE", default=125 * 1024 * 1024, cast=int)
    ALLOWED_EXTENSIONS: str = config("ALLOWED_EXTENSIONS", default=".doc,.docx")
    UPLOAD_CHUNK_SIZE: int = config("UPLOAD_CHUNK_SIZE", default=1024 * 1024, cast=int)

    @property
    def ALLOWED_EXTENSIONS_LIST(self) -> List[str]:
        """Get allowed extensions as lower-cased, dot-prefixed values."""
        extensions = []
        for item in self.ALLOWED_EXTENSIONS.split(","):
            item = item.strip().lower()
            if not item:
                continue
            extensions.append(item if item.startswith(".") else f".{item}")
        return extensions


class ClientSettings(BaseSettings):
    """Settings for the client-side session orchestrator."""

    BROKER_URL: str = config("BROKER_URL", default="http://localhost:5174")
    DOCUMENT_SERVER_URL: str = config("DOCUMENT_SERVER_URL", default="http://localhost:8080")
    CLIENT_TIMEOUT_SECONDS: float = config("CLIENT_TIMEOUT_SECONDS", default=30.0, cast=float)
    EDITOR_TEARDOWN_GRACE_SECONDS: float = config("EDITOR_TEARDOWN_GRACE_SECONDS", default=0.15, cast=float)


class CORSSettings(BaseSettings):
    """CORS-related settings."""

    CORS_ENABLED: bool = config("CORS_ENABLED", default=True, cast=bool)
    CORS_ORIGINS: str = config("CORS_ORIGINS", default="*")
    CORS_ALLOW_CREDENTIALS: bool = config("CORS_ALLOW_CREDENTIALS", default=False, cast=bool)

    @property
    def CORS_ORIGINS_LIST(self) -> List[str]:
        """Get CORS origins as a list."""
        if not self.CORS_ORIGINS:
            return ["*"]
        return [x.strip() for x in self.CORS_ORIGINS.split(",") if x.strip()]

    CORS_ALLOW_METHODS: str = config("CORS_ALLOW_METHODS", default="*")
    CORS_ALLOW_HEADERS: str = config("CORS_ALLOW_HEADERS", default="*")


class CompressionSettings(BaseSettings):
    """Compression-related settings."""

    GZIP_ENABLED: bool = config("GZIP_ENABLED", default=True, cast=bool)
    GZIP_MINIMUM_SIZE: int = config("GZIP_MINIMUM_SIZE", default=1000, cast=int)


class APIDocSettings(BaseSettings):
    """API documentation settings."""

    ENABLE_DOCS_IN_PRODUCTION: bool = config("ENABLE_DOCS_IN_PRODUCTION", default=False, cast=bool)
    DOCS_URL: str = config("DOCS_URL", default="/docs")
    REDOC_URL: str = config("REDOC_URL", default="/redoc")
    OPENAPI_URL: str = config("OPENAPI_URL", default="/openapi.json")

    API_TITLE: str = config("API_TITLE", default="")
    API_SUMMARY: str = config("API_SUMMARY", default="")
    API_DESCRIPTION: str = config("API_DESCRIPTION", default="")
    API_VERSION: str = config("API_VERSION", default="")


class AppSettings(BaseSettings):
    """Application-related settings."""

    APP_NAME: str = "Document Session Broker"
    APP_DESCRIPTION: str = "Document identity, editor token and upload lifecycle broker"
    DEBUG: bool = config("DEBUG", default=False, cast=bool)
    VERSION: str = "0.1.0"
    HOST: str = config("HOST", default="0.0.0.0")
    PORT: int = config("PORT", default=5174, cast=int)


class LoggingSettings(BaseSettings):
    """Centralized logging configuration settings."""

    LOG_LEVEL: str = config("LOG_LEVEL", default="INFO")

    LOG_CONSOLE_ENABLED: bool = config("LOG_CONSOLE_ENABLED", default=True, cast=bool)
    LOG_FILE_ENABLED: bool = config("LOG_FILE_ENABLED", default=False, cast=bool)
    LOG_FILE_PATH: str = config("LOG_FILE_PATH", default="logs/docbroker.log")
    LOG_FILE_MAX_SIZE: int = config("LOG_FILE_MAX_SIZE", default=10485760, cast=int)
    LOG_FILE_BACKUP_COUNT: int = config("LOG_FILE_BACKUP_COUNT", default=5, cast=int)

    LOG_CORRELATION_ID: bool = config("LOG_CORRELATION_ID", default=True, cast=bool)

    LOG_DEVELOPMENT_VERBOSE: bool = config("LOG_DEVELOPMENT_VERBOSE", default=True, cast=bool)
    LOG_PRODUCTION_OPTIMIZE: bool = config("LOG_PRODUCTION_OPTIMIZE", default=True, cast=bool)

    @property
    def LOG_LEVEL_INT(self) -> int:
        """Convert string log level to integer."""
        level_map = {
            "DEBUG": logging.DEBUG,
            "INFO": logging.INFO,
            "WARNING": logging.WARNING,
            "ERROR": logging.ERROR,
            "CRITICAL": logging.CRITICAL,
        }
        return level_map.get(self.LOG_LEVEL.upper(), logging.INFO)


class Settings(
    EnvironmentSettings,
    AuthSettings,
    DocumentKeySettings,
    RegistrySettings,
    StorageSettings,
    ClientSettings,
    CORSSettings,
    CompressionSettings,
    APIDocSettings,
    AppSettings,
    LoggingSettings,
):
    """Main settings class that combines all setting categories."""

    pass


settings = Settings()


def get_settings() -> Settings:
    """Get application settings.

    Returns:
        The application settings.
    """
    return settings

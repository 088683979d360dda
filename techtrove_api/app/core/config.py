"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for every field so the
application can be imported without any environment at all (tests
rely on this).  In a deployment the MongoDB credentials and port
should be supplied through the environment.
"""

import os
from dataclasses import dataclass
from typing import List
from urllib.parse import quote_plus


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "TechTrove API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str = os.getenv("LOG_FILE", "")

    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "5000"))

    # Comma-separated list of allowed CORS origins.  ``*`` allows any.
    cors_origins: str = os.getenv("CORS_ORIGINS", "*")

    # A full connection string wins over the individual Atlas parts
    # below.  When neither is set a local server is assumed.
    mongodb_uri_override: str = os.getenv("MONGODB_URI", "")
    db_user: str = os.getenv("DB_USER", "")
    db_pass: str = os.getenv("DB_PASS", "")
    db_host: str = os.getenv("DB_HOST", "cluster-1.dymuola.mongodb.net")
    db_app_name: str = os.getenv("DB_APP_NAME", "Cluster-1")
    db_name: str = os.getenv("DB_NAME", "techtrove_db")
    users_collection: str = os.getenv("USERS_COLLECTION", "techtrove_users")
    products_collection: str = os.getenv("PRODUCTS_COLLECTION", "techtrove_products")

    # Cost factor handed to bcrypt.gensalt.
    bcrypt_rounds: int = int(os.getenv("BCRYPT_ROUNDS", "10"))

    # Serve from process memory instead of MongoDB.  Data is lost on
    # restart; meant for local development and the test suite.
    use_in_memory_store: bool = _env_flag("USE_IN_MEMORY_STORE")

    @property
    def mongodb_uri(self) -> str:
        """Connection string for the document store."""
        if self.mongodb_uri_override:
            return self.mongodb_uri_override
        if self.db_user:
            return (
                f"mongodb+srv://{quote_plus(self.db_user)}:{quote_plus(self.db_pass)}"
                f"@{self.db_host}/?appName={self.db_app_name}"
            )
        return "mongodb://localhost:27017"

    @property
    def allowed_origins(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Environment variables must
# be set before this module is imported.
settings = Settings()

"""Settings for the APA back office.

Read from the environment (and .env) with pydantic-settings. The store and
auth backends are checked together when Settings is built, so a firestore
deployment without a service account fails at startup rather than on the
first request.
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Process configuration; every field maps to the upper-cased env var."""

    app_name: str = "apa"
    app_version: str = "1.0.0"
    debug: bool = False

    # "firestore" in production; "memory" for local runs and tests.
    store_backend: str = "firestore"
    memory_enforce_indexes: bool = False

    # Service account as inline JSON (key) or a file (path); the key wins.
    firebase_service_account_key: SecretStr | None = None
    firebase_service_account_path: str | None = None
    firebase_project_id: str = ""
    # Identity Toolkit key used by the email/password login proxy.
    firebase_web_api_key: SecretStr | None = None

    # "firebase" verifies Firebase ID tokens; "local" verifies HS256 tokens signed with secret_key.
    auth_backend: str = "firebase"
    secret_key: SecretStr = SecretStr("")
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 480

    # Comma-separated list of site and back-office origins.
    allowed_origins: str = "http://localhost:5173,http://localhost:3000"

    cloudinary_cloud_name: str = ""
    cloudinary_upload_preset: str = "apa_uploads"
    max_upload_size: int = 10 * 1024 * 1024
    max_pet_photos: int = 3

    # Upper bound between re-reads of a live query when no local write signalled a change.
    live_query_poll_seconds: float = 2.0

    request_id_header: str = "X-Request-ID"
    rate_limit_enabled: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_backends(self) -> "Settings":
        if self.store_backend == "firestore":
            has_key = (
                self.firebase_service_account_key
                and self.firebase_service_account_key.get_secret_value()
            )
            if not has_key and not self.firebase_service_account_path:
                raise ValueError(
                    "store_backend 'firestore' needs FIREBASE_SERVICE_ACCOUNT_KEY (service account JSON) "
                    "or FIREBASE_SERVICE_ACCOUNT_PATH (file with that JSON)."
                )
        elif self.store_backend != "memory":
            raise ValueError(
                f"store_backend must be 'firestore' or 'memory', got: {self.store_backend!r}"
            )
        if self.auth_backend == "firebase":
            if not self.firebase_project_id:
                raise ValueError(
                    "auth_backend 'firebase' needs FIREBASE_PROJECT_ID; ID tokens are checked against it."
                )
        elif self.auth_backend == "local":
            if not self.secret_key.get_secret_value():
                raise ValueError(
                    "auth_backend 'local' needs SECRET_KEY to sign tokens (e.g. openssl rand -hex 32)."
                )
        else:
            raise ValueError(
                f"auth_backend must be 'firebase' or 'local', got: {self.auth_backend!r}"
            )
        if self.max_pet_photos < 1:
            raise ValueError("max_pet_photos must be at least 1")
        return self

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    """Settings for this process, built on first use.

    Tests that change the environment call get_settings.cache_clear() first.
    """
    return Settings()

import json
import os
import threading
from urllib.parse import urlparse

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from .auth.rbac_contract import validate_page


load_dotenv()


class Settings(BaseModel):
    app_name: str = Field(default="Dealership Back Office")
    debug: bool = Field(default=False)
    allowed_origins: list[str] = Field(default_factory=list)
    secret_key: str | None = Field(default=None)
    algorithm: str = Field(default="HS256")
    rbac_fallback_page: str = Field(default="customers")
    landing_fallback_page: str = Field(default="customers")

    @classmethod
    def from_env(cls) -> "Settings":
        secret_key = os.getenv("SECRET_KEY", "").strip()
        if not secret_key:
            raise ValueError("SECRET_KEY environment variable must be set")

        raw_allowed_origins = os.getenv("ALLOWED_ORIGINS", "").strip()
        if not raw_allowed_origins:
            raise ValueError("ALLOWED_ORIGINS environment variable must be set")

        # CSV or JSON array
        allowed_origins: list[str] = []
        if raw_allowed_origins.startswith("["):
            try:
                parsed_list = json.loads(raw_allowed_origins)
            except json.JSONDecodeError as exc:
                raise ValueError(f"ALLOWED_ORIGINS JSON is malformed: {exc}") from exc
            if not isinstance(parsed_list, list):
                raise ValueError("ALLOWED_ORIGINS JSON must be an array")
            allowed_origins = [
                origin.strip() for origin in parsed_list if isinstance(origin, str) and origin.strip()
            ]
        else:
            allowed_origins = [
                origin.strip() for origin in raw_allowed_origins.split(",") if origin.strip()
            ]

        if not allowed_origins:
            raise ValueError("ALLOWED_ORIGINS must contain at least one origin")

        if "*" in allowed_origins:
            raise ValueError(
                "ALLOWED_ORIGINS cannot contain '*' when credentialed requests are used"
            )

        for origin in allowed_origins:
            parsed = urlparse(origin)
            if parsed.scheme not in {"http", "https"} or not parsed.netloc:
                raise ValueError(
                    "ALLOWED_ORIGINS must contain valid http/https origins with host"
                )

        rbac_fallback_page = os.getenv(
            "RBAC_FALLBACK_PAGE", cls.model_fields["rbac_fallback_page"].default
        ).strip()
        try:
            validate_page(rbac_fallback_page)
        except ValueError as exc:
            raise ValueError(f"RBAC_FALLBACK_PAGE is not a known page: {exc}") from exc

        landing_fallback_page = os.getenv(
            "LANDING_FALLBACK_PAGE", cls.model_fields["landing_fallback_page"].default
        ).strip()
        try:
            validate_page(landing_fallback_page)
        except ValueError as exc:
            raise ValueError(f"LANDING_FALLBACK_PAGE is not a known page: {exc}") from exc

        return cls(
            app_name=os.getenv("APP_NAME", cls.model_fields["app_name"].default),
            debug=os.getenv("DEBUG", "false").lower() == "true",
            allowed_origins=allowed_origins,
            secret_key=secret_key,
            algorithm=os.getenv("ALGORITHM", cls.model_fields["algorithm"].default),
            rbac_fallback_page=rbac_fallback_page,
            landing_fallback_page=landing_fallback_page,
        )


_settings_instance: Settings | None = None
_settings_lock = threading.Lock()


def get_settings() -> Settings:
    """Get settings instance, creating it on first access.

    The module can be imported without environment validation; validation
    happens on first access, typically during startup.

    Raises:
        ValueError: If required environment variables are missing or invalid
    """
    global _settings_instance

    if _settings_instance is not None:
        return _settings_instance

    with _settings_lock:
        # Another thread may have initialized while we waited for the lock
        if _settings_instance is None:
            _settings_instance = Settings.from_env()

    return _settings_instance


class _SettingsProxy:
    """Proxy to defer settings creation until first attribute access."""

    def __getattr__(self, name: str):
        return getattr(get_settings(), name)


settings = _SettingsProxy()  # type: ignore[assignment]

"""
Configuration module - loads settings from the environment / .env file.
Secrets can be overridden from Google Secret Manager when available.
"""
import json
import os
import logging
from functools import lru_cache
from typing import Any, List, Optional

from pydantic_settings import BaseSettings
from pydantic import Field, field_validator, model_validator

logger = logging.getLogger(__name__)


def get_secret_from_gcp(secret_id: str, project_id: Optional[str] = None) -> Optional[str]:
    """
    Fetch secret from Google Secret Manager.
    Returns None if not available (fallback to env vars).
    """
    project = project_id or os.environ.get("GCP_PROJECT_ID") or os.environ.get("GOOGLE_CLOUD_PROJECT")
    if not project:
        return None

    try:
        from google.cloud import secretmanager

        client = secretmanager.SecretManagerServiceClient()
        name = f"projects/{project}/secrets/{secret_id}/versions/latest"
        response = client.access_secret_version(request={"name": name})
        return response.payload.data.decode("UTF-8")
    except Exception as e:
        logger.debug(f"Could not fetch secret {secret_id} from Secret Manager: {e}")
        return None


class Settings(BaseSettings):
    """Application settings with Secret Manager integration."""

    # GCP
    gcp_project_id: str = Field(default="", alias="GCP_PROJECT_ID")

    # GCS
    gcs_bucket: str = Field(default="", alias="GCS_BUCKET")
    gcs_public_base_url: str = Field(
        default="https://storage.googleapis.com",
        alias="GCS_PUBLIC_BASE_URL",
    )
    signed_documents_folder: str = Field(default="signed-documents", alias="SIGNED_DOCUMENTS_FOLDER")

    # Signed document generation
    product_name: str = Field(default="QuickInk", alias="PRODUCT_NAME")
    use_system_fonts: bool = Field(
        default=True,
        alias="USE_SYSTEM_FONTS",
        description="Use installed DejaVu/FreeSans/Liberation fonts instead of base-14 Helvetica",
    )
    certificate_fallback_on_fetch_error: bool = Field(
        default=False,
        alias="CERTIFICATE_FALLBACK_ON_FETCH_ERROR",
        description="Compose a signing certificate when the source PDF cannot be fetched",
    )
    pdf_failure_is_fatal: bool = Field(
        default=False,
        alias="PDF_FAILURE_IS_FATAL",
        description="Fail the signing request when no signed PDF could be produced",
    )

    # Environment
    environment: str = Field(default="development", alias="ENVIRONMENT")
    debug: bool = Field(default=False, alias="DEBUG")

    # CORS
    allowed_origins: List[str] = Field(default=[], alias="ALLOWED_ORIGINS")

    @field_validator("allowed_origins", mode='before')
    @classmethod
    def _parse_allowed_origins(cls, v: Any) -> List[str]:
        """Parse ALLOWED_ORIGINS from JSON list, CSV, semicolon-separated string, or list."""
        if v is None:
            return []
        if isinstance(v, list):
            return v
        if isinstance(v, str):
            s = v.strip()
            if not s:
                return []
            if s.startswith("["):
                try:
                    return json.loads(s)
                except json.JSONDecodeError:
                    pass  # Fall through to delimiter parsing
            # Semicolon is useful in Cloud Build where comma separates env vars
            parts = [p.strip() for p in s.replace(",", ";").split(";")]
            return [p for p in parts if p]
        return []

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"
        populate_by_name = True

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._load_secrets_from_gcp()

    def _load_secrets_from_gcp(self):
        """Override settings with values from Secret Manager if available."""
        secret_mappings = {
            "gcs_bucket": "GCS_BUCKET",
        }

        for attr, secret_id in secret_mappings.items():
            secret_value = get_secret_from_gcp(secret_id, self.gcp_project_id)
            if secret_value:
                setattr(self, attr, secret_value)
                logger.info(f"Loaded {secret_id} from Secret Manager")

    @model_validator(mode='after')
    def validate_storage(self) -> 'Settings':
        """Warn about storage configuration that cannot work in production."""
        if self.environment == "production":
            if not self.gcs_bucket:
                logger.error(
                    "CRITICAL: GCS_BUCKET is not set in production! "
                    "Signed documents cannot be uploaded."
                )
            if not self.gcs_public_base_url.startswith("https://"):
                logger.warning(
                    f"Configuration Warning: GCS_PUBLIC_BASE_URL ('{self.gcs_public_base_url}') "
                    f"does not start with 'https://' in a '{self.environment}' environment."
                )
        return self


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Development origins (only in non-production)
DEV_CORS_ORIGINS = [
    "http://localhost:5173",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]


def get_cors_origins() -> List[str]:
    """
    Get list of allowed CORS origins.

    Combines:
    1. Origins from ALLOWED_ORIGINS env variable
    2. Development origins (if not in production)
    """
    settings = get_settings()
    origins = set(settings.allowed_origins)

    if settings.environment != "production":
        origins.update(DEV_CORS_ORIGINS)

    return sorted(origins)

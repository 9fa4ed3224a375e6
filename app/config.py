"""Application configuration"""
from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings

    Built once by the application factory and handed to every collaborator.
    Missing or blank HubSpot values fail at construction time.
    """

    # HubSpot
    hubspot_access_token: str
    hubspot_portal_id: str
    hubspot_form_id: str
    hubspot_api_base: str = "https://api.hubapi.com"
    hubspot_submit_base: str = "https://api.hsforms.com"
    hubspot_timeout: float = 30.0

    # Application
    environment: str = "development"
    # Unhandled exception text is only returned to clients when enabled
    expose_errors: bool = False
    cors_origins: list[str] = ["*"]

    class Config:
        env_file = ".env"
        case_sensitive = False

    @field_validator("hubspot_access_token", "hubspot_portal_id", "hubspot_form_id")
    @classmethod
    def require_value(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("HubSpot configuration is missing required values")
        return value.strip()

    @field_validator("hubspot_api_base", "hubspot_submit_base")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

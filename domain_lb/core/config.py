import re
from functools import lru_cache
from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# GCE resource names: lowercase letter first, then letters, digits or hyphens
GCE_NAME_PATTERN = re.compile(r"^[a-z]([-a-z0-9]*[a-z0-9])?$")
GCE_NAME_MAX_LENGTH = 63

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseSettings):
    """Tool settings with environment variable support."""

    # Google Cloud Platform Configuration
    GCP_PROJECT_ID: Optional[str] = Field(
        default=None,
        description="Project passed to every gcloud call (falls back to the active gcloud config)",
    )
    GCLOUD_BINARY: str = "gcloud"

    # Shared load balancer resources. Changing these breaks interoperation
    # with load balancers created under the default names.
    URL_MAP_NAME: str = Field(
        default="custom-domains-sgtm",
        description="Name of the shared URL map; proxy and forwarding rule derive from it",
    )
    IP_ADDRESS_NAME: str = Field(
        default="cd-sgtm-global-ip",
        description="Name of the shared global static IP address",
    )
    RESOURCE_PREFIX: str = Field(
        default="cd",
        description="Prefix for per-domain certificate, NEG and backend service names",
    )
    NETWORK_TIER: str = "PREMIUM"

    # Logging Configuration
    LOG_LEVEL: str = "WARNING"
    LOG_FORMAT: str = "text"  # json or text

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator("URL_MAP_NAME", "IP_ADDRESS_NAME", "RESOURCE_PREFIX")
    @classmethod
    def validate_resource_name(cls, v: str) -> str:
        """Shared resource names must already be valid GCE names."""
        if len(v) > GCE_NAME_MAX_LENGTH or not GCE_NAME_PATTERN.match(v):
            raise ValueError(
                f"'{v}' is not a valid resource name "
                "(lowercase letters, digits and hyphens, starting with a letter)"
            )
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in VALID_LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {', '.join(VALID_LOG_LEVELS)}")
        return level

    @field_validator("LOG_FORMAT")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        fmt = v.lower()
        if fmt not in ["json", "text"]:
            raise ValueError("LOG_FORMAT must be 'json' or 'text'")
        return fmt

    @property
    def proxy_name(self) -> str:
        """Target HTTPS proxy attached to the shared URL map."""
        return f"{self.URL_MAP_NAME}-proxy"

    @property
    def forwarding_rule_name(self) -> str:
        """Global forwarding rule that binds the shared IP to the proxy."""
        return f"{self.URL_MAP_NAME}-fwr"


@lru_cache()
def get_settings() -> Settings:
    """Settings from the environment, built on first use.

    Building lazily keeps invalid environment values out of module import,
    so the entry point can report them.
    """
    return Settings()

"""
Configuration management for the Label Print Service.
Loads environment variables with validation.
"""

from typing import Literal, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # =============================================================================
    # PrintNode Relay
    # =============================================================================
    printnode_api_key: Optional[str] = None
    printnode_base_url: str = "https://api.printnode.com"
    printnode_timeout_seconds: Optional[float] = None  # None = wait indefinitely

    # =============================================================================
    # Batch Print Queue
    # =============================================================================
    queue_debounce_seconds: float = 3.0
    queue_group_by_printer: bool = False  # One relay job per (printer, options) group

    # =============================================================================
    # Template Storage
    # =============================================================================
    templates_dir: str = "templates"

    # =============================================================================
    # Request Limits
    # =============================================================================
    max_request_body_mb: int = 50  # Templates carry base64 images

    # =============================================================================
    # Deployment Configuration
    # =============================================================================
    cors_origins: list[str] = ["*"]
    port: int = 3000
    log_level: Literal["debug", "info", "warning", "error"] = "info"
    environment: Literal["development", "staging", "production"] = "development"

    # =============================================================================
    # Computed Properties
    # =============================================================================
    @property
    def max_request_body_bytes(self) -> int:
        """Convert max request body size from MB to bytes."""
        return self.max_request_body_mb * 1024 * 1024

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"


# Global settings instance
settings = Settings()

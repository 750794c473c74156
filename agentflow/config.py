"""
Configuration for AgentFlow.
"""

from enum import Enum
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LogFormat(str, Enum):
    """Log output formats."""

    JSON = "json"
    PRETTY = "pretty"


class WizardFlow(str, Enum):
    """Guided flows backed by the wizard engine."""

    ONBOARDING = "onboarding"
    AGENT = "agent"


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="AGENTFLOW_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # API connection
    api_base_url: str = Field(default="http://localhost:5000", description="AgentFlow API base URL")
    api_key: Optional[str] = Field(default=None, description="Bearer token for the API")
    organization_id: Optional[str] = Field(default=None, description="Tenant for multi-tenant requests")
    timeout: float = Field(default=30.0, gt=0, description="Request timeout in seconds")
    max_retries: int = Field(default=3, ge=0, description="Transport-level connect retries")

    # Logging
    log_level: str = Field(default="info", description="Log level")
    log_format: LogFormat = Field(default=LogFormat.PRETTY, description="Log renderer")

    # Wizard endpoints
    onboarding_path: str = Field(default="/api/onboarding", description="Business onboarding API prefix")
    agent_wizard_path: str = Field(default="/api/agent-wizard", description="Agent creation API prefix")

    def wizard_path(self, flow: WizardFlow) -> str:
        """Get the API prefix serving a flow."""
        if flow == WizardFlow.AGENT:
            return self.agent_wizard_path
        return self.onboarding_path


@lru_cache
def get_settings() -> Settings:
    """Get cached settings."""
    return Settings()


class Endpoints:
    """Wizard endpoint paths, relative to a flow prefix."""

    STATE = ""
    SAVE_STEP = "/save-step"
    COMPLETE_STEP = "/complete-step"
    COMPLETE = "/complete"

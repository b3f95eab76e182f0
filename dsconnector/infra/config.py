"""
Configuration management using pydantic-settings.

All connector settings are loaded from environment variables
with the DSC_ prefix.
"""

from __future__ import annotations

from pydantic import field_validator
from pydantic_settings import BaseSettings

from dsconnector.download.artifacts import ArtifactFailurePolicy


class ConnectorConfig(BaseSettings):
    """
    Connector engine configuration.

    Environment variables are prefixed with DSC_, e.g.:
    - DSC_CONNECTOR_ID=https://connector.example.org
    - DSC_REQUEST_TIMEOUT_SECONDS=60
    """

    model_config = {"env_prefix": "DSC_"}

    # Identity
    connector_id: str = "https://localhost:8080"
    outbound_model_version: str = "4.2.7"
    security_token: str = ""

    # Transport
    request_timeout_seconds: float = 30.0
    connect_timeout_seconds: float = 10.0

    # Messages
    description_depth: int = 10

    # Negotiation
    confirm_agreements: bool = False

    # Artifact download: "abort" or "continue"
    artifact_failure_policy: ArtifactFailurePolicy = ArtifactFailurePolicy.ABORT

    # Peers used when the caller names none
    default_recipients: str = ""  # Comma-separated

    @field_validator("artifact_failure_policy", mode="before")
    @classmethod
    def _lower_policy(cls, value):
        return value.lower() if isinstance(value, str) else value

    def get_default_recipients(self) -> list[str]:
        """Return configured recipients as a list."""
        return [r.strip() for r in self.default_recipients.split(",") if r.strip()]

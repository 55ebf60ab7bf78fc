"""
Deployment settings for the audio visualizer infrastructure.
Configuration for the CDK app, AWS clients, post-deployment tooling and logging.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class DeploymentSettings(BaseSettings):
    """
    Deployment configuration.
    All values configurable via environment variables or .env files.
    """

    # ENVIRONMENT & DEPLOYMENT
    # Named environment profile: "dev" or "prod"
    environment: str = "dev"
    stack_name_prefix: str = "AudioVisualizer"

    # AWS CORE CONFIGURATION
    # Fall back to CDK_DEFAULT_ACCOUNT / CDK_DEFAULT_REGION when unset
    aws_account_id: Optional[str] = None
    aws_region: Optional[str] = None

    # Local emulation (LocalStack) for post-deployment tooling
    aws_endpoint_url: Optional[str] = None

    # AWS Client Configuration
    aws_max_retry_attempts: int = 3
    aws_max_pool_connections: int = 10

    # FUNCTION IMAGE CONFIGURATION
    # Image directories in the profiles are resolved against this root
    build_context_root: str = "."
    # Explicit instruction-set override; never derived from the build host
    function_architecture: Optional[str] = None

    # RENDER CLIENT CONFIGURATION
    # Slightly above the 15 minute function timeout
    render_request_timeout_seconds: int = 930
    render_connect_timeout_seconds: int = 10

    # MONITORING & LOGGING CONFIGURATION
    log_level: str = "INFO"
    log_format: str = "colored"
    service_name: str = "audio-visualizer"

    # Configuration
    model_config = SettingsConfigDict(
        env_file=[".env.local", ".env.development", ".env.staging", ".env.production"],
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @property
    def stack_name(self) -> str:
        """CloudFormation stack name for the configured environment."""
        return self.stack_name_for(self.environment)

    def stack_name_for(self, environment: str) -> str:
        """CloudFormation stack name for a named environment."""
        return f"{self.stack_name_prefix}-{environment}"

    @property
    def use_local_aws(self) -> bool:
        """Check if post-deployment tooling should target a local AWS emulator."""
        return self.aws_endpoint_url is not None

    @property
    def is_production_env(self) -> bool:
        """Check if the configured environment is production."""
        return self.environment.lower() in ("prod", "production")

    @property
    def use_json_logs(self) -> bool:
        """Structured JSON logs in production or when requested explicitly."""
        return self.is_production_env or self.log_format.lower() == "json"


# Global deployment settings instance
deployment_settings = DeploymentSettings()

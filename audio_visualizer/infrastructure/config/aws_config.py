"""
AWS service configuration and client management.
Handles CloudFormation and S3 connections for post-deployment tooling.
"""
import boto3
from botocore.config import Config
from typing import Optional, Dict, Any
from .deployment_settings import DeploymentSettings, deployment_settings


class AWSConfig:
    """
    Manages AWS service connections and configuration.
    Clients are created lazily and share one retry/pool configuration.
    """

    def __init__(self, settings: Optional[DeploymentSettings] = None):
        self.settings = settings or deployment_settings
        self._cloudformation_client: Optional[boto3.client] = None
        self._s3_client: Optional[boto3.client] = None
        self._boto_config = Config(
            region_name=self.settings.aws_region,
            retries={
                'max_attempts': self.settings.aws_max_retry_attempts,
                'mode': 'adaptive'
            },
            max_pool_connections=self.settings.aws_max_pool_connections
        )

    @property
    def cloudformation_client(self) -> boto3.client:
        """Get or create CloudFormation client."""
        if self._cloudformation_client is None:
            self._cloudformation_client = self._create_client('cloudformation')
        return self._cloudformation_client

    @property
    def s3_client(self) -> boto3.client:
        """Get or create S3 client."""
        if self._s3_client is None:
            self._s3_client = self._create_client('s3')
        return self._s3_client

    def client_kwargs(self, service_name: str) -> Dict[str, Any]:
        """
        Build boto3 client arguments for a service.

        Local emulation uses the configured endpoint with dummy credentials.
        """
        kwargs: Dict[str, Any] = {
            'service_name': service_name,
            'config': self._boto_config
        }
        if self.settings.aws_region:
            kwargs['region_name'] = self.settings.aws_region

        if self.settings.use_local_aws:
            kwargs.update({
                'endpoint_url': self.settings.aws_endpoint_url,
                'aws_access_key_id': 'test',
                'aws_secret_access_key': 'test'
            })
        return kwargs

    def _create_client(self, service_name: str) -> boto3.client:
        return boto3.client(**self.client_kwargs(service_name))


# Global AWS configuration instance
aws_config = AWSConfig()

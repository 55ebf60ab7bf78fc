"""
Named environment profiles for the audio visualizer deployment.
Pure configuration data, shared limits plus the per-environment variant fields.
"""
from typing import Dict, Any, List

from audio_visualizer.core.models.descriptor import UnknownEnvironmentError


class DeploymentProfiles:
    """
    Static deployment limits and per-environment function variants.
    Shared values are identical across environments.
    """

    # Function limits
    FUNCTION_TIMEOUT_MINUTES = 15
    EPHEMERAL_STORAGE_GB = 5
    RESERVED_CONCURRENCY = 10

    # Endpoint policy: open, unauthenticated invocation
    ENDPOINT_AUTH_TYPE = "none"
    ENDPOINT_ALLOWED_ORIGINS = ["*"]

    # Bucket teardown
    BUCKET_REMOVAL_BEHAVIOR = "destroy"

    # Output names
    ENDPOINT_URL_OUTPUT = "LambdaURL"
    BUCKET_NAME_OUTPUT = "OutputBucketName"

    # Variant fields
    DEV = {
        'image_directory': 'function/visualizer',
        'image_exclude': ['target'],
        'memory_mb': 3008,
        'architecture': 'arm64',
    }

    PROD = {
        'image_directory': 'function',
        'image_exclude': ['target', 'visualizer/target'],
        'memory_mb': 4096,
        'architecture': 'x86_64',
    }

    @classmethod
    def _registry(cls) -> Dict[str, Dict[str, Any]]:
        return {
            'dev': cls.DEV,
            'prod': cls.PROD,
        }

    @classmethod
    def available(cls) -> List[str]:
        """Names of all configured environments."""
        return sorted(cls._registry())

    @classmethod
    def get(cls, environment: str) -> Dict[str, Any]:
        """
        Get the variant fields for a named environment.

        Args:
            environment: Environment name, case-insensitive

        Returns:
            Copy of the profile dictionary

        Raises:
            UnknownEnvironmentError: If no profile exists for the name
        """
        profile = cls._registry().get((environment or "").strip().lower())
        if profile is None:
            raise UnknownEnvironmentError(environment, cls.available())
        return {
            **profile,
            'image_exclude': list(profile['image_exclude']),
        }

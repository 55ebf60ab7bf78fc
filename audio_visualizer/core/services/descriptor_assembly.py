"""
Deployment descriptor assembly.
Builds the resource specs in dependency order: bucket first, then everything
that needs the bucket identifier.
"""
from typing import Optional

from pydantic import ValidationError

from audio_visualizer.core.models.descriptor import (
    OUTPUT_BUCKET_ENV_VAR,
    AccessLevel,
    Architecture,
    AuthType,
    BucketSpec,
    DeploymentDescriptor,
    DescriptorValidationError,
    EndpointSpec,
    FunctionSpec,
    ImageSource,
    OutputSource,
    OutputSpec,
    PermissionGrant,
    RemovalBehavior,
    is_placeholder,
)
from audio_visualizer.core.services.deployment_profiles import DeploymentProfiles
from audio_visualizer.infrastructure.logging.log_config import get_logger

logger = get_logger("DescriptorAssembler")


class DescriptorAssembler:
    """
    Assembles the deployment descriptor for one named environment.

    The bucket spec is available up front; the full descriptor needs the
    bucket's generated identifier, so it can only be assembled once the
    bucket exists (or a provisioning token stands in for it).
    """

    def __init__(self, environment: str, architecture: Optional[str] = None):
        self.environment = environment.strip().lower()
        self.profile = DeploymentProfiles.get(self.environment)
        self.architecture = self._resolve_architecture(architecture)

    def _resolve_architecture(self, override: Optional[str]) -> Architecture:
        value = override or self.profile['architecture']
        try:
            return Architecture(value.strip().lower())
        except ValueError:
            raise DescriptorValidationError(
                f"Unsupported architecture '{value}'",
                field="architecture",
                error_details={"allowed": [a.value for a in Architecture]}
            )

    def bucket_spec(self) -> BucketSpec:
        """Spec for the output bucket."""
        return BucketSpec(removal_behavior=RemovalBehavior(DeploymentProfiles.BUCKET_REMOVAL_BEHAVIOR))

    def image_source(self) -> ImageSource:
        return ImageSource(
            directory=self.profile['image_directory'],
            exclude=self.profile['image_exclude']
        )

    def endpoint_spec(self) -> EndpointSpec:
        return EndpointSpec(
            auth_type=AuthType(DeploymentProfiles.ENDPOINT_AUTH_TYPE),
            allowed_origins=list(DeploymentProfiles.ENDPOINT_ALLOWED_ORIGINS)
        )

    def assemble(self, bucket_identifier: str) -> DeploymentDescriptor:
        """
        Assemble the finalized descriptor.

        Args:
            bucket_identifier: Generated bucket name (or provisioning token)

        Returns:
            Validated deployment descriptor

        Raises:
            DescriptorValidationError: If the identifier is unresolved or the
                resulting descriptor violates a limit or wiring rule
        """
        if is_placeholder(bucket_identifier):
            raise DescriptorValidationError(
                "Bucket identifier cannot be empty or a placeholder",
                field="bucket_identifier",
                error_details={"value": bucket_identifier}
            )

        try:
            bucket = self.bucket_spec()
            function = FunctionSpec(
                architecture=self.architecture,
                image=self.image_source(),
                memory_mb=self.profile['memory_mb'],
                ephemeral_storage_gb=DeploymentProfiles.EPHEMERAL_STORAGE_GB,
                timeout_minutes=DeploymentProfiles.FUNCTION_TIMEOUT_MINUTES,
                max_concurrency=DeploymentProfiles.RESERVED_CONCURRENCY,
                environment={OUTPUT_BUCKET_ENV_VAR: bucket_identifier}
            )
            grant = PermissionGrant(
                grantee=function.construct_id,
                bucket=bucket_identifier,
                access=[AccessLevel.READ, AccessLevel.WRITE]
            )
            descriptor = DeploymentDescriptor(
                environment_name=self.environment,
                bucket=bucket,
                function=function,
                endpoint=self.endpoint_spec(),
                grant=grant,
                outputs=[
                    OutputSpec(
                        name=DeploymentProfiles.ENDPOINT_URL_OUTPUT,
                        source=OutputSource.ENDPOINT_URL,
                        description="Public invocation URL of the audio-to-video function"
                    ),
                    OutputSpec(
                        name=DeploymentProfiles.BUCKET_NAME_OUTPUT,
                        source=OutputSource.BUCKET_IDENTIFIER,
                        description="Bucket receiving rendered videos"
                    ),
                ]
            )
        except ValidationError as e:
            errors = e.errors()
            logger.error("Descriptor validation failed", extra={'extra_fields': {
                "environment": self.environment,
                "errors": [error.get("msg") for error in errors]
            }})
            first = errors[0] if errors else {}
            raise DescriptorValidationError(
                f"Invalid deployment descriptor: {first.get('msg', str(e))}",
                field=".".join(str(part) for part in first.get("loc", ())),
                error_details={"errors": [error.get("msg") for error in errors]}
            ) from e

        logger.debug("Descriptor assembled", extra={'extra_fields': {
            "environment": self.environment,
            "architecture": self.architecture.value,
            "memory_mb": descriptor.function.memory_mb
        }})
        return descriptor

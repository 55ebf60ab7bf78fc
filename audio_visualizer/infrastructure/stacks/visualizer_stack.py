"""
CDK stack for the audio visualizer.
Renders a deployment descriptor into a bucket, an image function, its public
URL, the bucket grant and the stack outputs.
"""
from pathlib import Path
from typing import Dict, Optional

from aws_cdk import (
    Stack,
    CfnOutput,
    Duration,
    IgnoreMode,
    RemovalPolicy,
    Size,
    Tags,
    aws_ecr_assets as ecr_assets,
    aws_lambda as lambda_,
    aws_s3 as s3,
)
from constructs import Construct

from audio_visualizer.core.models.descriptor import (
    Architecture,
    AuthType,
    BucketSpec,
    DeploymentDescriptor,
    OutputSource,
    RemovalBehavior,
)
from audio_visualizer.core.models.descriptor import IgnoreMode as DescriptorIgnoreMode
from audio_visualizer.core.services.descriptor_assembly import DescriptorAssembler
from audio_visualizer.infrastructure.logging.log_config import get_logger

logger = get_logger("AudioVisualizerStack")


REMOVAL_POLICIES = {
    RemovalBehavior.DESTROY: RemovalPolicy.DESTROY,
    RemovalBehavior.RETAIN: RemovalPolicy.RETAIN,
}

ARCHITECTURES = {
    Architecture.ARM64: lambda_.Architecture.ARM_64,
    Architecture.X86_64: lambda_.Architecture.X86_64,
}

# Docker build platform matching the function architecture
IMAGE_PLATFORMS = {
    Architecture.ARM64: ecr_assets.Platform.LINUX_ARM64,
    Architecture.X86_64: ecr_assets.Platform.LINUX_AMD64,
}

AUTH_TYPES = {
    AuthType.NONE: lambda_.FunctionUrlAuthType.NONE,
    AuthType.AWS_IAM: lambda_.FunctionUrlAuthType.AWS_IAM,
}

IGNORE_MODES = {
    DescriptorIgnoreMode.GLOB: IgnoreMode.GLOB,
    DescriptorIgnoreMode.GIT: IgnoreMode.GIT,
    DescriptorIgnoreMode.DOCKER: IgnoreMode.DOCKER,
}


class AudioVisualizerStack(Stack):
    """Output bucket plus the audio-to-video function behind a public URL."""

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        assembler: DescriptorAssembler,
        build_context_root: Optional[str] = None,
        **kwargs,
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        self.assembler = assembler
        self.build_context_root = Path(build_context_root or ".")

        # Bucket first: its generated name feeds the function environment
        self.output_bucket = self._create_output_bucket(assembler.bucket_spec())
        self.descriptor: DeploymentDescriptor = assembler.assemble(self.output_bucket.bucket_name)

        self.function = self._create_function()
        self.function_url = self._create_function_url()
        self._grant_bucket_access()
        self.stack_outputs = self._create_outputs()

        Tags.of(self).add("Project", "AudioVisualizer")
        Tags.of(self).add("Environment", self.descriptor.environment_name)

        logger.info("Audio visualizer stack defined", extra={'extra_fields': {
            "stack_name": construct_id,
            "environment": self.descriptor.environment_name,
            "architecture": self.descriptor.function.architecture.value,
            "memory_mb": self.descriptor.function.memory_mb
        }})

    def _create_output_bucket(self, spec: BucketSpec) -> s3.Bucket:
        """Create the bucket that receives rendered videos."""
        return s3.Bucket(
            self,
            spec.construct_id,
            removal_policy=REMOVAL_POLICIES[spec.removal_behavior],
        )

    def _image_directory(self) -> str:
        directory = Path(self.descriptor.function.image.directory)
        if not directory.is_absolute():
            directory = self.build_context_root / directory
        return str(directory)

    def _create_function(self) -> lambda_.Function:
        """Create the container-image function with its fixed limits."""
        spec = self.descriptor.function
        return lambda_.Function(
            self,
            spec.construct_id,
            architecture=ARCHITECTURES[spec.architecture],
            runtime=lambda_.Runtime.FROM_IMAGE,
            handler=lambda_.Handler.FROM_IMAGE,
            code=lambda_.Code.from_asset_image(
                self._image_directory(),
                ignore_mode=IGNORE_MODES[spec.image.ignore_mode],
                exclude=list(spec.image.exclude),
                platform=IMAGE_PLATFORMS[spec.architecture],
            ),
            environment=dict(spec.environment),
            reserved_concurrent_executions=spec.max_concurrency,
            timeout=Duration.minutes(spec.timeout_minutes),
            memory_size=spec.memory_mb,
            ephemeral_storage_size=Size.gibibytes(spec.ephemeral_storage_gb),
        )

    def _create_function_url(self) -> lambda_.FunctionUrl:
        """Attach the public invocation URL."""
        endpoint = self.descriptor.endpoint
        return self.function.add_function_url(
            auth_type=AUTH_TYPES[endpoint.auth_type],
            cors=lambda_.FunctionUrlCorsOptions(
                allowed_origins=list(endpoint.allowed_origins),
            ),
        )

    def _grant_bucket_access(self) -> None:
        """Authorize the function's execution role against the bucket."""
        grant = self.descriptor.grant
        if grant.can_read and grant.can_write:
            self.output_bucket.grant_read_write(self.function)
        elif grant.can_read:
            self.output_bucket.grant_read(self.function)
        else:
            self.output_bucket.grant_write(self.function)

    def _create_outputs(self) -> Dict[str, CfnOutput]:
        """Surface the invocation URL and bucket name."""
        values = {
            OutputSource.ENDPOINT_URL: self.function_url.url,
            OutputSource.BUCKET_IDENTIFIER: self.output_bucket.bucket_name,
        }
        return {
            output.name: CfnOutput(
                self,
                output.name,
                value=values[output.source],
                description=output.description or None,
            )
            for output in self.descriptor.outputs
        }

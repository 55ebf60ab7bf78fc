"""
Reads the provisioned invocation URL and bucket name back from CloudFormation.
"""
from typing import Dict, Optional

from botocore.exceptions import BotoCoreError, ClientError

from audio_visualizer.core.models.descriptor import DeploymentOutputs
from audio_visualizer.core.services.deployment_profiles import DeploymentProfiles
from audio_visualizer.infrastructure.config.aws_config import AWSConfig, aws_config
from audio_visualizer.infrastructure.logging.log_config import get_logger
from audio_visualizer.infrastructure.logging.log_decorators import (
    log_infrastructure_operation,
    op_config
)

logger = get_logger("StackOutputsReader")


class StackOutputsError(Exception):
    """Exception raised when stack outputs cannot be read."""

    def __init__(self, message: str, stack_name: str, error_details: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.stack_name = stack_name
        self.error_details = error_details or {}


class StackOutputsReader:
    """Reads stack outputs via CloudFormation describe_stacks."""

    def __init__(self, config: Optional[AWSConfig] = None):
        self.aws_config = config or aws_config

    @property
    def cloudformation_client(self):
        return self.aws_config.cloudformation_client

    def raw_outputs(self, stack_name: str) -> Dict[str, str]:
        """
        Get all outputs of a stack as a name to value mapping.

        Raises:
            StackOutputsError: If the stack does not exist or cannot be described
        """
        try:
            response = self.cloudformation_client.describe_stacks(StackName=stack_name)
        except ClientError as e:
            error_code = e.response.get('Error', {}).get('Code', 'Unknown')
            error_message = e.response.get('Error', {}).get('Message', str(e))
            logger.error("Failed to describe stack", extra={'extra_fields': {
                "stack_name": stack_name,
                "error_code": error_code,
                "error_message": error_message
            }})
            raise StackOutputsError(
                f"Could not describe stack '{stack_name}': {error_message}",
                stack_name=stack_name,
                error_details={"error_code": error_code, "aws_error": error_message}
            ) from e
        except BotoCoreError as e:
            # No credentials, unreachable endpoint and similar client-side failures
            logger.error("Could not reach CloudFormation", extra={'extra_fields': {
                "stack_name": stack_name,
                "error_type": type(e).__name__,
                "error": str(e)
            }})
            raise StackOutputsError(
                f"Could not describe stack '{stack_name}': {str(e)}",
                stack_name=stack_name,
                error_details={"error_type": type(e).__name__, "aws_error": str(e)}
            ) from e

        stacks = response.get('Stacks', [])
        if not stacks:
            raise StackOutputsError(f"Stack '{stack_name}' not found", stack_name=stack_name)

        return {
            output['OutputKey']: output['OutputValue']
            for output in stacks[0].get('Outputs', [])
        }

    @log_infrastructure_operation("read_stack_outputs", **op_config(args=True))
    def get_outputs(self, stack_name: str) -> DeploymentOutputs:
        """
        Get the invocation URL and bucket name of a deployed stack.

        Args:
            stack_name: CloudFormation stack name

        Returns:
            DeploymentOutputs for the stack

        Raises:
            StackOutputsError: If the stack or one of the outputs is missing
        """
        outputs = self.raw_outputs(stack_name)

        required = [DeploymentProfiles.ENDPOINT_URL_OUTPUT, DeploymentProfiles.BUCKET_NAME_OUTPUT]
        missing = [name for name in required if not outputs.get(name)]
        if missing:
            raise StackOutputsError(
                f"Stack '{stack_name}' is missing outputs: {', '.join(missing)}",
                stack_name=stack_name,
                error_details={"missing_outputs": ", ".join(missing)}
            )

        return DeploymentOutputs(
            stack_name=stack_name,
            function_url=outputs[DeploymentProfiles.ENDPOINT_URL_OUTPUT],
            bucket_name=outputs[DeploymentProfiles.BUCKET_NAME_OUTPUT]
        )

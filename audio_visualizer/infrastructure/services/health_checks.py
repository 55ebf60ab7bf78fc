"""
Health checks service for the deployed audio visualizer.
Checks the output bucket and the public invocation endpoint of a stack.
"""
from typing import Dict, Any, Optional

import requests
from botocore.exceptions import BotoCoreError, ClientError

from audio_visualizer.core.models.descriptor import DeploymentOutputs
from audio_visualizer.infrastructure.config.aws_config import AWSConfig, aws_config
from audio_visualizer.infrastructure.services.stack_outputs import (
    StackOutputsError,
    StackOutputsReader
)

PREFLIGHT_ORIGIN = "https://health-check.invalid"
PREFLIGHT_TIMEOUT_SECONDS = 10


class HealthCheckService:
    """
    Service for performing health checks on the deployed components.
    Component failures are reported in the result, never raised.
    """

    def __init__(
        self,
        outputs_reader: Optional[StackOutputsReader] = None,
        config: Optional[AWSConfig] = None,
        session: Optional[requests.Session] = None
    ):
        self.aws_config = config or aws_config
        self.outputs_reader = outputs_reader or StackOutputsReader(self.aws_config)
        self.session = session or requests.Session()

    def check_all_services(self, stack_name: str) -> Dict[str, Any]:
        """
        Check every deployed component of a stack.

        Returns:
            Dictionary with per-component results and an overall status
        """
        results: Dict[str, Any] = {"stack_name": stack_name}

        try:
            outputs = self.outputs_reader.get_outputs(stack_name)
        except StackOutputsError as e:
            results.update({
                "status": "unhealthy",
                "error": str(e),
                "details": e.error_details
            })
            return results

        results["outputs"] = outputs.model_dump()
        results["bucket"] = self._check_bucket(outputs)
        results["endpoint"] = self._check_endpoint(outputs)
        results["status"] = self._overall_status(results["bucket"], results["endpoint"])
        return results

    def _check_bucket(self, outputs: DeploymentOutputs) -> Dict[str, Any]:
        """
        Check the output bucket is reachable.

        Returns:
            Dictionary with bucket health status
        """
        result = {"bucket": outputs.bucket_name}
        try:
            self.aws_config.s3_client.head_bucket(Bucket=outputs.bucket_name)
            result["status"] = "healthy"
        except ClientError as e:
            error_code = e.response.get('Error', {}).get('Code', 'Unknown')
            result.update({
                "status": "unhealthy",
                "error_code": error_code,
                "message": (
                    f"Bucket '{outputs.bucket_name}' does not exist"
                    if error_code in ['404', 'NoSuchBucket'] else str(e)
                )
            })
        except BotoCoreError as e:
            result.update({
                "status": "unhealthy",
                "error_code": type(e).__name__,
                "message": str(e)
            })
        return result

    def _check_endpoint(self, outputs: DeploymentOutputs) -> Dict[str, Any]:
        """
        Send a CORS preflight to the invocation URL.

        The endpoint is expected to answer without authentication and to
        allow any origin.
        """
        result: Dict[str, Any] = {"url": outputs.function_url}
        try:
            response = self.session.options(
                outputs.function_url,
                headers={
                    "Origin": PREFLIGHT_ORIGIN,
                    "Access-Control-Request-Method": "POST"
                },
                timeout=PREFLIGHT_TIMEOUT_SECONDS
            )
        except requests.RequestException as e:
            result.update({"status": "unhealthy", "error": str(e)})
            return result

        allowed_origin = response.headers.get("Access-Control-Allow-Origin")
        result.update({
            "status_code": response.status_code,
            "allowed_origin": allowed_origin
        })

        if response.status_code >= 500:
            result["status"] = "unhealthy"
        elif response.status_code in (401, 403):
            result.update({"status": "degraded", "message": "Endpoint requires authentication"})
        elif allowed_origin not in ("*", PREFLIGHT_ORIGIN):
            result.update({"status": "degraded", "message": "Endpoint does not allow cross-origin requests"})
        else:
            result["status"] = "healthy"
        return result

    @staticmethod
    def _overall_status(*components: Dict[str, Any]) -> str:
        statuses = [component.get("status") for component in components]
        if all(status == "healthy" for status in statuses):
            return "healthy"
        if any(status == "unhealthy" for status in statuses):
            return "unhealthy"
        return "degraded"

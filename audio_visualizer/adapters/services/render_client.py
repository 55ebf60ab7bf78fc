"""
HTTP client for the deployed function URL.
Implements render invocation with requests.
"""
from typing import Optional, Tuple

import requests
from pydantic import ValidationError

from audio_visualizer.core.models.render import RenderRequest, RenderResponse
from audio_visualizer.core.ports.render_invocation import (
    RenderInvocationPort,
    RenderInvocationError
)
from audio_visualizer.infrastructure.config.deployment_settings import (
    DeploymentSettings,
    deployment_settings
)
from audio_visualizer.infrastructure.logging.log_config import get_logger

logger = get_logger("FunctionUrlRenderClient")


class FunctionUrlRenderClient(RenderInvocationPort):
    """
    Invokes the visualizer through its public function URL.

    The endpoint is unauthenticated, so a plain JSON POST is enough.
    """

    def __init__(
        self,
        function_url: str,
        session: Optional[requests.Session] = None,
        settings: Optional[DeploymentSettings] = None
    ):
        if not function_url or not function_url.strip():
            raise ValueError("Function URL cannot be empty")
        self.function_url = function_url.strip()
        self.session = session or requests.Session()
        self.settings = settings or deployment_settings

    @property
    def timeout(self) -> Tuple[int, int]:
        """Connect and read timeouts."""
        return (
            self.settings.render_connect_timeout_seconds,
            self.settings.render_request_timeout_seconds
        )

    def render(self, request: RenderRequest) -> RenderResponse:
        logger.info("Submitting render request", extra={'extra_fields': {
            "function_url": self.function_url,
            "input_url": request.input_url,
            "preset_duration": request.preset_duration,
            "resolution": request.resolution
        }})

        try:
            response = self.session.post(
                self.function_url,
                json=request.model_dump(exclude_none=True),
                timeout=self.timeout
            )
        except requests.RequestException as e:
            logger.error("Render request failed", extra={'extra_fields': {
                "function_url": self.function_url,
                "error": str(e)
            }})
            raise RenderInvocationError(
                f"Failed to reach render endpoint: {str(e)}",
                function_url=self.function_url,
                error_details={"original_error": str(e)}
            ) from e

        if not response.ok:
            logger.warning("Render endpoint returned an error", extra={'extra_fields': {
                "function_url": self.function_url,
                "status_code": response.status_code
            }})
            raise RenderInvocationError(
                f"Render failed with status {response.status_code}",
                function_url=self.function_url,
                error_details={
                    "status_code": response.status_code,
                    "response": response.text
                }
            )

        try:
            result = RenderResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise RenderInvocationError(
                f"Invalid response from render endpoint: {str(e)}",
                function_url=self.function_url,
                error_details={"response": response.text}
            ) from e

        logger.info("Render completed", extra={'extra_fields': {
            "function_url": self.function_url,
            "output_video_url": result.output_video_url
        }})
        return result

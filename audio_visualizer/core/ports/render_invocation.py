"""
Render invocation port.
Defines the interface for submitting audio to the deployed visualizer.
"""
from abc import ABC, abstractmethod
from typing import Dict, Any, Optional

from audio_visualizer.core.models.render import RenderRequest, RenderResponse


class RenderInvocationPort(ABC):
    """
    Port for invoking the audio-to-video function.
    """

    @abstractmethod
    def render(self, request: RenderRequest) -> RenderResponse:
        """
        Submit an audio file for visualization.

        Args:
            request: Render parameters

        Returns:
            Function response with the rendered video URL

        Raises:
            RenderInvocationError: If the invocation fails
        """
        pass


class RenderInvocationError(Exception):
    """Exception raised when a render invocation fails."""

    def __init__(self, message: str, function_url: str, error_details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.function_url = function_url
        self.error_details = error_details or {}

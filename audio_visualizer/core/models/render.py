"""
Render request and response schemas for the audio-to-video function.
"""
import re
from typing import Optional

from pydantic import BaseModel, Field, field_validator


# Seconds each visualizer preset stays on screen
DEFAULT_PRESET_DURATION = 10
DEFAULT_RESOLUTION = "1920x1080"

RESOLUTION_PATTERN = re.compile(r"^(\d+)x(\d+)$")


class RenderRequest(BaseModel):
    """
    Request body accepted by the function URL.
    """
    input_url: str = Field(..., description="URL of the audio file to visualize")
    preset_duration: Optional[int] = Field(
        default=DEFAULT_PRESET_DURATION,
        ge=1,
        description="Seconds each preset is shown"
    )
    resolution: str = Field(default=DEFAULT_RESOLUTION, description="Output resolution as WIDTHxHEIGHT")

    @field_validator('input_url')
    @classmethod
    def validate_input_url(cls, v):
        if not v or not v.strip():
            raise ValueError("Input url is required")
        v = v.strip()
        if not v.lower().startswith(("http://", "https://")):
            raise ValueError("Input url must be an http(s) URL")
        return v

    @field_validator('resolution')
    @classmethod
    def validate_resolution(cls, v):
        match = RESOLUTION_PATTERN.match(v.strip().lower())
        if not match:
            raise ValueError("Resolution must look like 1920x1080")
        width, height = (int(part) for part in match.groups())
        if width == 0 or height == 0:
            raise ValueError("Resolution dimensions must be positive")
        return f"{width}x{height}"


class RenderResponse(BaseModel):
    """
    Response body returned by the function URL.
    """
    message: str
    output_video_url: Optional[str] = Field(
        default=None,
        description="Presigned download URL for the rendered video"
    )

    @property
    def succeeded(self) -> bool:
        return self.output_video_url is not None

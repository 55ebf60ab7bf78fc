#!/usr/bin/env python3
"""
Submit an audio file to the deployed visualizer and print the video URL.
"""
import sys
import argparse

from pydantic import ValidationError

from audio_visualizer.adapters.services.render_client import FunctionUrlRenderClient
from audio_visualizer.core.models.render import DEFAULT_PRESET_DURATION, DEFAULT_RESOLUTION, RenderRequest
from audio_visualizer.core.ports.render_invocation import RenderInvocationError
from audio_visualizer.core.services.deployment_profiles import DeploymentProfiles
from audio_visualizer.infrastructure.config.deployment_settings import deployment_settings
from audio_visualizer.infrastructure.logging.log_config import get_logger
from audio_visualizer.infrastructure.services.stack_outputs import StackOutputsError, StackOutputsReader

logger = get_logger("RenderAudio")


def main():
    """Entry point with argument parsing and error handling."""
    parser = argparse.ArgumentParser(description="Render an audio file into a visualizer video")
    parser.add_argument("input_url", help="Public URL of the audio file")
    parser.add_argument("--preset-duration", type=int, default=DEFAULT_PRESET_DURATION)
    parser.add_argument("--resolution", default=DEFAULT_RESOLUTION)
    parser.add_argument(
        "--environment",
        default=deployment_settings.environment,
        choices=DeploymentProfiles.available()
    )
    parser.add_argument("--function-url", help="Skip the stack lookup and use this URL")

    args = parser.parse_args()

    try:
        request = RenderRequest(
            input_url=args.input_url,
            preset_duration=args.preset_duration,
            resolution=args.resolution
        )
        function_url = args.function_url
        if not function_url:
            stack_name = deployment_settings.stack_name_for(args.environment)
            function_url = StackOutputsReader().get_outputs(stack_name).function_url

        response = FunctionUrlRenderClient(function_url).render(request)
        print(response.output_video_url or response.message)
        sys.exit(0 if response.succeeded else 1)

    except KeyboardInterrupt:
        sys.exit(1)
    except (ValidationError, StackOutputsError, RenderInvocationError) as e:
        logger.error("Render failed", extra={'extra_fields': {"error": str(e)}})
        sys.exit(1)


if __name__ == "__main__":
    main()

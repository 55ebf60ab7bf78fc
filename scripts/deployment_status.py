#!/usr/bin/env python3
"""
Deployment status script for the audio visualizer.
Prints the stack outputs and health of a named environment.
"""
import sys
import json
import argparse

from audio_visualizer.core.services.deployment_profiles import DeploymentProfiles
from audio_visualizer.infrastructure.config.deployment_settings import deployment_settings
from audio_visualizer.infrastructure.logging.log_config import get_logger
from audio_visualizer.infrastructure.logging.log_decorators import (
    log_infrastructure_operation,
    op_config
)
from audio_visualizer.infrastructure.services.health_checks import HealthCheckService
from audio_visualizer.infrastructure.services.stack_outputs import StackOutputsReader


class DeploymentStatusScript:
    """Post-deployment status operations."""

    def __init__(self, environment: str):
        self.logger = get_logger(self.__class__.__name__)
        self.environment = environment
        self.stack_name = deployment_settings.stack_name_for(environment)
        self.outputs_reader = StackOutputsReader()
        self.health_service = HealthCheckService(outputs_reader=self.outputs_reader)

    @log_infrastructure_operation("show_outputs", **op_config("DEBUG"))
    def show_outputs(self):
        """Read the stack outputs."""
        return self.outputs_reader.get_outputs(self.stack_name).model_dump()

    @log_infrastructure_operation("health_check", **op_config())
    def perform_health_check(self):
        """Check bucket and endpoint health."""
        return self.health_service.check_all_services(self.stack_name)


def main():
    """Entry point with argument parsing and error handling."""
    parser = argparse.ArgumentParser(description="Audio Visualizer Deployment Status")
    parser.add_argument(
        "--environment",
        default=deployment_settings.environment,
        choices=DeploymentProfiles.available(),
        help="Named environment to inspect"
    )
    parser.add_argument("--outputs-only", action="store_true", help="Only print stack outputs")

    args = parser.parse_args()

    status_script = DeploymentStatusScript(args.environment)

    try:
        if args.outputs_only:
            result = status_script.show_outputs()
            success = True
        else:
            result = status_script.perform_health_check()
            success = result.get("status") == "healthy"

        print(json.dumps(result, indent=2, default=str))
        sys.exit(0 if success else 1)

    except KeyboardInterrupt:
        sys.exit(1)
    except Exception as e:
        status_script.logger.error("Deployment status failed", extra={
            'extra_fields': {"error": str(e), "stack_name": status_script.stack_name}
        })
        sys.exit(1)


if __name__ == "__main__":
    main()

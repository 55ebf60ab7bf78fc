"""
Audio Visualizer CDK application.
Builds the app and the stack for the selected named environment.
"""
import os
from typing import Optional

import aws_cdk as cdk

from audio_visualizer.core.services.descriptor_assembly import DescriptorAssembler
from audio_visualizer.infrastructure.config.deployment_settings import (
    DeploymentSettings,
    deployment_settings,
)
from audio_visualizer.infrastructure.logging.log_config import get_logger
from audio_visualizer.infrastructure.stacks.visualizer_stack import AudioVisualizerStack

logger = get_logger("CdkApp")


def create_app(settings: Optional[DeploymentSettings] = None, app: Optional[cdk.App] = None) -> cdk.App:
    """
    Create the CDK app with the audio visualizer stack.

    The environment comes from CDK context (`cdk deploy -c environment=prod`)
    and falls back to the ENVIRONMENT setting.
    """
    settings = settings or deployment_settings
    app = app or cdk.App()

    environment = app.node.try_get_context("environment") or settings.environment
    architecture = app.node.try_get_context("architecture") or settings.function_architecture

    assembler = DescriptorAssembler(environment, architecture=architecture)

    AudioVisualizerStack(
        app,
        settings.stack_name_for(assembler.environment),
        assembler=assembler,
        build_context_root=settings.build_context_root,
        env=cdk.Environment(
            account=settings.aws_account_id or os.getenv("CDK_DEFAULT_ACCOUNT"),
            region=settings.aws_region or os.getenv("CDK_DEFAULT_REGION"),
        ),
        description=f"Audio to video visualizer ({assembler.environment})",
    )

    logger.info("CDK app created", extra={'extra_fields': {
        "environment": assembler.environment,
        "architecture": assembler.architecture.value,
        "stack_name": settings.stack_name_for(assembler.environment)
    }})
    return app

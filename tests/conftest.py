"""
Shared test configuration and fixtures for the audio visualizer tests.
"""
import pytest
from unittest.mock import Mock

from audio_visualizer.core.models.descriptor import DeploymentOutputs
from audio_visualizer.core.services.descriptor_assembly import DescriptorAssembler
from tests.utils.mock_helpers import MockHelpers


# ENVIRONMENT & CONFIGURATION FIXTURES

@pytest.fixture
def test_settings(monkeypatch):
    """Create DeploymentSettings instance with test configuration."""
    test_env = MockHelpers.create_test_environment_config()
    for key, value in test_env.items():
        monkeypatch.setenv(key, value)

    from audio_visualizer.infrastructure.config.deployment_settings import DeploymentSettings
    return DeploymentSettings()


@pytest.fixture(scope="session")
def build_context(tmp_path_factory):
    """Build context root holding both function image directories."""
    root = tmp_path_factory.mktemp("build-context")
    return MockHelpers.create_build_context(root)


# DESCRIPTOR FIXTURES

@pytest.fixture
def dev_assembler() -> DescriptorAssembler:
    return DescriptorAssembler("dev")


@pytest.fixture
def prod_assembler() -> DescriptorAssembler:
    return DescriptorAssembler("prod")


# MOCK FIXTURES

@pytest.fixture
def sample_outputs() -> DeploymentOutputs:
    return DeploymentOutputs(
        stack_name="AudioVisualizer-dev",
        function_url="https://abc123.lambda-url.us-east-1.on.aws/",
        bucket_name="audiovisualizer-dev-outputbucket-1a2b3c"
    )


@pytest.fixture
def mock_aws_config() -> Mock:
    """AWSConfig stand-in exposing mocked boto3 clients."""
    config = Mock()
    config.cloudformation_client = MockHelpers.create_mock_cloudformation_client()
    config.s3_client = MockHelpers.create_mock_s3_client()
    return config


@pytest.fixture
def mock_session() -> Mock:
    return MockHelpers.create_mock_http_session()

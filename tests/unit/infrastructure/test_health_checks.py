#!/usr/bin/env python3
"""
Health check service tests.
"""
import pytest
import requests
from botocore.exceptions import EndpointConnectionError, NoCredentialsError
from unittest.mock import Mock

from audio_visualizer.infrastructure.services.health_checks import HealthCheckService
from audio_visualizer.infrastructure.services.stack_outputs import StackOutputsError, StackOutputsReader
from tests.utils.mock_helpers import MockHelpers


@pytest.fixture
def outputs_reader(sample_outputs):
    reader = Mock()
    reader.get_outputs.return_value = sample_outputs
    return reader


@pytest.fixture
def health_service(outputs_reader, mock_aws_config, mock_session):
    return HealthCheckService(outputs_reader=outputs_reader, config=mock_aws_config, session=mock_session)


@pytest.mark.unit
def test_all_services_healthy(health_service, mock_aws_config, mock_session, sample_outputs):
    results = health_service.check_all_services("AudioVisualizer-dev")

    assert results["status"] == "healthy"
    assert results["bucket"]["status"] == "healthy"
    assert results["endpoint"]["status"] == "healthy"
    assert results["endpoint"]["allowed_origin"] == "*"
    mock_aws_config.s3_client.head_bucket.assert_called_once_with(Bucket=sample_outputs.bucket_name)

    _, kwargs = mock_session.options.call_args
    assert kwargs["headers"]["Access-Control-Request-Method"] == "POST"
    assert "Origin" in kwargs["headers"]


@pytest.mark.unit
def test_missing_bucket_is_unhealthy(health_service, mock_aws_config):
    mock_aws_config.s3_client.head_bucket.side_effect = MockHelpers.create_client_error("404", "Not Found", "HeadBucket")

    results = health_service.check_all_services("AudioVisualizer-dev")

    assert results["status"] == "unhealthy"
    assert results["bucket"]["status"] == "unhealthy"
    assert "does not exist" in results["bucket"]["message"]


@pytest.mark.unit
def test_authenticated_endpoint_is_degraded(health_service, mock_session):
    mock_session.options.return_value = MockHelpers.create_http_response(status_code=403)

    results = health_service.check_all_services("AudioVisualizer-dev")

    assert results["endpoint"]["status"] == "degraded"
    assert results["status"] == "degraded"


@pytest.mark.unit
def test_endpoint_without_cors_is_degraded(health_service, mock_session):
    mock_session.options.return_value = MockHelpers.create_http_response(status_code=200, headers={})

    results = health_service.check_all_services("AudioVisualizer-dev")

    assert results["endpoint"]["status"] == "degraded"


@pytest.mark.unit
def test_unreachable_endpoint_is_unhealthy(health_service, mock_session):
    mock_session.options.side_effect = requests.ConnectionError("connection refused")

    results = health_service.check_all_services("AudioVisualizer-dev")

    assert results["endpoint"]["status"] == "unhealthy"
    assert "connection refused" in results["endpoint"]["error"]
    assert results["status"] == "unhealthy"


@pytest.mark.unit
def test_missing_stack_reported_not_raised(health_service, outputs_reader, mock_aws_config):
    outputs_reader.get_outputs.side_effect = StackOutputsError(
        "Stack 'AudioVisualizer-dev' not found",
        stack_name="AudioVisualizer-dev"
    )

    results = health_service.check_all_services("AudioVisualizer-dev")

    assert results["status"] == "unhealthy"
    assert "not found" in results["error"]
    mock_aws_config.s3_client.head_bucket.assert_not_called()


@pytest.mark.unit
def test_unreachable_s3_is_unhealthy(health_service, mock_aws_config):
    mock_aws_config.s3_client.head_bucket.side_effect = EndpointConnectionError(endpoint_url="https://s3")

    results = health_service.check_all_services("AudioVisualizer-dev")

    assert results["status"] == "unhealthy"
    assert results["bucket"]["status"] == "unhealthy"
    assert results["bucket"]["error_code"] == "EndpointConnectionError"
    assert results["endpoint"]["status"] == "healthy"


@pytest.mark.unit
def test_missing_credentials_reported_not_raised(mock_aws_config, mock_session):
    mock_aws_config.cloudformation_client.describe_stacks.side_effect = NoCredentialsError()
    service = HealthCheckService(
        outputs_reader=StackOutputsReader(mock_aws_config),
        config=mock_aws_config,
        session=mock_session
    )

    results = service.check_all_services("AudioVisualizer-dev")

    assert results["status"] == "unhealthy"
    assert results["details"]["error_type"] == "NoCredentialsError"
    mock_aws_config.s3_client.head_bucket.assert_not_called()
    mock_session.options.assert_not_called()

#!/usr/bin/env python3
"""
Descriptor model test suite.
Validates resource limits, placeholder rejection and cross-resource wiring.
"""
import pytest
from pydantic import ValidationError

from audio_visualizer.core.models.descriptor import (
    OUTPUT_BUCKET_ENV_VAR,
    AccessLevel,
    Architecture,
    BucketSpec,
    DeploymentDescriptor,
    EndpointSpec,
    FunctionSpec,
    ImageSource,
    OutputSource,
    OutputSpec,
    PermissionGrant,
    RemovalBehavior,
    is_placeholder,
)


def _function(**overrides) -> FunctionSpec:
    values = {
        "architecture": Architecture.ARM64,
        "image": ImageSource(directory="function/visualizer", exclude=["target"]),
        "memory_mb": 3008,
        "ephemeral_storage_gb": 5,
        "timeout_minutes": 15,
        "max_concurrency": 10,
        "environment": {OUTPUT_BUCKET_ENV_VAR: "B1"},
    }
    values.update(overrides)
    return FunctionSpec(**values)


def _descriptor(function: FunctionSpec, grant_bucket: str = "B1", grantee: str = "AudioToVideoLambda"):
    return DeploymentDescriptor(
        environment_name="dev",
        bucket=BucketSpec(),
        function=function,
        endpoint=EndpointSpec(),
        grant=PermissionGrant(grantee=grantee, bucket=grant_bucket),
        outputs=[OutputSpec(name="OutputBucketName", source=OutputSource.BUCKET_IDENTIFIER)]
    )


@pytest.mark.unit
@pytest.mark.parametrize("value", [None, "", "   ", "<bucket-name>", " <OUTPUT_BUCKET> "])
def test_placeholder_values_detected(value):
    assert is_placeholder(value) is True


@pytest.mark.unit
@pytest.mark.parametrize("value", ["B1", "audiovisualizer-dev-outputbucket-1a2b3c", "${Token[TOKEN.42]}", "none", "null", "todo", "tbd"])
def test_real_identifiers_accepted(value):
    assert is_placeholder(value) is False


@pytest.mark.unit
def test_spec_defaults():
    """Bucket destroyed on teardown, endpoint open and unauthenticated, grant read+write."""
    assert BucketSpec().removal_behavior == RemovalBehavior.DESTROY
    endpoint = EndpointSpec()
    assert endpoint.auth_type.value == "none"
    assert endpoint.allowed_origins == ["*"]
    grant = PermissionGrant(grantee="fn", bucket="B1")
    assert grant.access == [AccessLevel.READ, AccessLevel.WRITE]
    assert grant.can_read and grant.can_write


@pytest.mark.unit
@pytest.mark.parametrize("field,value", [
    ("memory_mb", 64),
    ("memory_mb", 10241),
    ("ephemeral_storage_gb", 0),
    ("ephemeral_storage_gb", 11),
    ("timeout_minutes", 0),
    ("timeout_minutes", 16),
    ("max_concurrency", 0),
])
def test_function_limits_enforced(field, value):
    with pytest.raises(ValidationError):
        _function(**{field: value})


@pytest.mark.unit
@pytest.mark.parametrize("value", ["", "   ", "<bucket>"])
def test_function_environment_rejects_unresolved_values(value):
    with pytest.raises(ValidationError, match="no resolved value"):
        _function(environment={OUTPUT_BUCKET_ENV_VAR: value})


@pytest.mark.unit
def test_grant_rejects_placeholder_bucket():
    with pytest.raises(ValidationError):
        PermissionGrant(grantee="fn", bucket="")


@pytest.mark.unit
def test_descriptor_requires_output_bucket_variable():
    function = _function(environment={"OTHER": "value"})
    with pytest.raises(ValidationError, match=OUTPUT_BUCKET_ENV_VAR):
        _descriptor(function)


@pytest.mark.unit
def test_descriptor_rejects_duplicated_bucket_identifier():
    function = _function(environment={OUTPUT_BUCKET_ENV_VAR: "B1", "ALSO_BUCKET": "B1"})
    with pytest.raises(ValidationError, match="exactly once"):
        _descriptor(function)


@pytest.mark.unit
def test_descriptor_rejects_grant_to_other_bucket():
    with pytest.raises(ValidationError, match="different bucket"):
        _descriptor(_function(), grant_bucket="B2")


@pytest.mark.unit
def test_descriptor_rejects_grant_to_other_principal():
    with pytest.raises(ValidationError, match="issued to the function"):
        _descriptor(_function(), grantee="SomethingElse")


@pytest.mark.unit
def test_descriptor_is_immutable():
    descriptor = _descriptor(_function())
    with pytest.raises(ValidationError):
        descriptor.environment_name = "prod"


@pytest.mark.unit
def test_variant_fields_flatten_nested_specs():
    fields = _descriptor(_function()).variant_fields()
    assert fields["function.memory_mb"] == 3008
    assert fields["function.image.directory"] == "function/visualizer"
    assert fields[f"function.environment.{OUTPUT_BUCKET_ENV_VAR}"] == "B1"
    assert fields["bucket.removal_behavior"] == "destroy"
    assert "environment_name" not in fields

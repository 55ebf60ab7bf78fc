"""
Deployment descriptor domain models.
Typed, validated description of the bucket, function, endpoint, grant and outputs.
"""
from enum import Enum
from typing import Dict, Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# Environment variable through which the function learns the bucket identifier
OUTPUT_BUCKET_ENV_VAR = "OUTPUT_BUCKET"


class DescriptorValidationError(Exception):
    """Domain exception for an invalid deployment descriptor."""

    def __init__(self, message: str, field: str = "", error_details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.field = field
        self.error_details = error_details or {}
        super().__init__(self.message)


class UnknownEnvironmentError(DescriptorValidationError):
    """Raised when a named environment has no profile."""

    def __init__(self, environment: str, available: List[str]):
        super().__init__(
            f"Unknown environment '{environment}'. Available: {', '.join(available)}",
            field="environment",
            error_details={"environment": environment, "available": available}
        )
        self.environment = environment


def is_placeholder(value: Optional[str]) -> bool:
    """
    Check if a value is empty or an unfilled `<...>` template marker.

    Words such as `none` or `todo` are valid bucket names and pass.
    """
    if value is None:
        return True
    stripped = value.strip()
    if not stripped:
        return True
    return stripped.startswith("<") and stripped.endswith(">")


class RemovalBehavior(str, Enum):
    """What happens to a resource on teardown."""
    DESTROY = "destroy"
    RETAIN = "retain"


class Architecture(str, Enum):
    """Function instruction-set architecture."""
    ARM64 = "arm64"
    X86_64 = "x86_64"


class AuthType(str, Enum):
    """Invocation endpoint authentication."""
    NONE = "none"
    AWS_IAM = "aws_iam"


class AccessLevel(str, Enum):
    """Bucket access granted to the function."""
    READ = "read"
    WRITE = "write"


class IgnoreMode(str, Enum):
    """How exclude patterns in the build context are interpreted."""
    GLOB = "glob"
    GIT = "git"
    DOCKER = "docker"


class OutputSource(str, Enum):
    """Which provisioned value a stack output surfaces."""
    ENDPOINT_URL = "endpoint_url"
    BUCKET_IDENTIFIER = "bucket_identifier"


class BucketSpec(BaseModel):
    """Output artifact bucket."""
    model_config = ConfigDict(frozen=True)

    construct_id: str = Field(default="OutputBucket", min_length=1)
    removal_behavior: RemovalBehavior = Field(default=RemovalBehavior.DESTROY)


class ImageSource(BaseModel):
    """Container image build context for the function."""
    model_config = ConfigDict(frozen=True)

    directory: str = Field(..., min_length=1, description="Build context directory")
    exclude: List[str] = Field(default_factory=list, description="Paths left out of the build context")
    ignore_mode: IgnoreMode = Field(default=IgnoreMode.GIT)


class FunctionSpec(BaseModel):
    """
    Container-image function with fixed resource limits.
    Limits follow the platform's documented ranges.
    """
    model_config = ConfigDict(frozen=True)

    construct_id: str = Field(default="AudioToVideoLambda", min_length=1)
    architecture: Architecture
    image: ImageSource
    memory_mb: int = Field(..., ge=128, le=10240)
    ephemeral_storage_gb: int = Field(..., ge=1, le=10)
    timeout_minutes: int = Field(..., ge=1, le=15)
    max_concurrency: int = Field(..., ge=1)
    environment: Dict[str, str] = Field(default_factory=dict)

    @field_validator('environment')
    @classmethod
    def validate_environment(cls, v):
        """Reject unresolved environment values."""
        for name, value in v.items():
            if not name or not name.strip():
                raise ValueError("Environment variable name cannot be empty")
            if is_placeholder(value):
                raise ValueError(f"Environment variable '{name}' has no resolved value")
        return v


class EndpointSpec(BaseModel):
    """Public invocation URL attached to the function."""
    model_config = ConfigDict(frozen=True)

    auth_type: AuthType = Field(default=AuthType.NONE)
    allowed_origins: List[str] = Field(default_factory=lambda: ["*"], min_length=1)


class PermissionGrant(BaseModel):
    """Bucket access granted to the function's execution identity."""
    model_config = ConfigDict(frozen=True)

    grantee: str = Field(..., min_length=1, description="Construct id of the function")
    bucket: str = Field(..., description="Bucket identifier")
    access: List[AccessLevel] = Field(
        default_factory=lambda: [AccessLevel.READ, AccessLevel.WRITE],
        min_length=1
    )

    @field_validator('bucket')
    @classmethod
    def validate_bucket(cls, v):
        if is_placeholder(v):
            raise ValueError("Grant bucket identifier cannot be empty or a placeholder")
        return v

    @property
    def can_read(self) -> bool:
        return AccessLevel.READ in self.access

    @property
    def can_write(self) -> bool:
        return AccessLevel.WRITE in self.access


class OutputSpec(BaseModel):
    """Value surfaced after provisioning."""
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    source: OutputSource
    description: str = ""


class DeploymentDescriptor(BaseModel):
    """
    Finalized resource graph for one named environment.

    The bucket identifier appears exactly once in the function environment
    and is the same bucket the grant targets.
    """
    model_config = ConfigDict(frozen=True)

    environment_name: str = Field(..., min_length=1)
    bucket: BucketSpec
    function: FunctionSpec
    endpoint: EndpointSpec
    grant: PermissionGrant
    outputs: List[OutputSpec]

    @model_validator(mode='after')
    def validate_wiring(self):
        bucket_identifier = self.function.environment.get(OUTPUT_BUCKET_ENV_VAR)
        if bucket_identifier is None:
            raise ValueError(f"Function environment is missing {OUTPUT_BUCKET_ENV_VAR}")

        occurrences = list(self.function.environment.values()).count(bucket_identifier)
        if occurrences != 1:
            raise ValueError(
                f"Bucket identifier must appear exactly once in the function environment, found {occurrences}"
            )

        if self.grant.bucket != bucket_identifier:
            raise ValueError("Permission grant targets a different bucket than the function environment")

        if self.grant.grantee != self.function.construct_id:
            raise ValueError("Permission grant must be issued to the function")

        names = [output.name for output in self.outputs]
        if len(names) != len(set(names)):
            raise ValueError("Output names must be unique")
        return self

    @property
    def bucket_identifier(self) -> str:
        return self.function.environment[OUTPUT_BUCKET_ENV_VAR]

    def variant_fields(self) -> Dict[str, Any]:
        """Flattened view used to compare environments field by field."""
        data = self.model_dump(mode="json", exclude={"environment_name"})
        flattened: Dict[str, Any] = {}

        def _flatten(prefix: str, value: Any) -> None:
            if isinstance(value, dict):
                for key, item in value.items():
                    _flatten(f"{prefix}.{key}" if prefix else key, item)
            else:
                flattened[prefix] = value

        _flatten("", data)
        return flattened


class DeploymentOutputs(BaseModel):
    """Outputs read back from a provisioned stack."""
    stack_name: str
    function_url: str
    bucket_name: str

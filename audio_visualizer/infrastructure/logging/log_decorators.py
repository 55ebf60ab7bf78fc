"""
Logging decorator for post-deployment operations against a stack.
Wraps reader and script methods with start, completion and failure records.
"""
import logging
import functools
import time
import inspect
import traceback
from typing import Dict, Any, Optional, Callable, Set

from audio_visualizer.infrastructure.config.deployment_settings import deployment_settings
from .log_config import get_logger


# Argument and result keys masked before logging
DEFAULT_SENSITIVE_FIELDS: Set[str] = {
    'secret', 'token', 'access_key', 'signature', 'credential', 'password'
}


def op_config(
    level: str = "INFO",
    args: bool = True,
    result: bool = True,
    blacklist: Optional[Set[str]] = None
) -> Dict[str, Any]:
    """Keyword arguments for ``log_infrastructure_operation``."""
    return {
        "level": level,
        "include_args": args,
        "include_result": result,
        "sensitive_fields": blacklist or set()
    }


def _sanitize_sensitive_data(data: Any, blacklist: Set[str]) -> Any:
    """
    Mask values whose key contains a sensitive name.

    Pydantic models (descriptors, stack outputs) are dumped first so their
    fields go through the same masking.
    """
    if hasattr(data, 'model_dump'):
        data = data.model_dump(mode="json")
    if isinstance(data, dict):
        return {
            key: "[REDACTED]"
            if any(name in str(key).lower() for name in blacklist)
            else _sanitize_sensitive_data(value, blacklist)
            for key, value in data.items()
        }
    if isinstance(data, (list, tuple)):
        return [_sanitize_sensitive_data(item, blacklist) for item in data]
    if isinstance(data, bytes):
        return f"[BINARY_DATA_{len(data)}_BYTES]"
    return data


def log_infrastructure_operation(
    operation: str,
    level: str = "INFO",
    include_args: bool = False,
    include_result: bool = True,
    sensitive_fields: Optional[Set[str]] = None
) -> Callable:
    """
    Decorator for methods that talk to a deployed stack.

    The logger is named after the owning class. When the call carries a
    ``stack_name`` argument it is added to every record. Exceptions are
    logged with their duration and re-raised unchanged.
    """
    blacklist = DEFAULT_SENSITIVE_FIELDS | set(sensitive_fields or ())
    log_level = getattr(logging, level.upper(), logging.INFO)
    error_level = logging.CRITICAL if log_level == logging.CRITICAL else logging.ERROR

    def decorator(func: Callable) -> Callable:
        signature = inspect.signature(func)

        @functools.wraps(func)
        def wrapper(self, *args, **kwargs):
            logger = get_logger(self.__class__.__name__)

            arguments = signature.bind(self, *args, **kwargs)
            arguments.apply_defaults()
            call_args = {k: v for k, v in arguments.arguments.items() if k != 'self'}

            context: Dict[str, Any] = {
                "operation": operation,
                "environment": deployment_settings.environment,
                "aws_region": deployment_settings.aws_region
            }
            if "stack_name" in call_args:
                context["stack_name"] = call_args["stack_name"]
            if include_args:
                context["arguments"] = _sanitize_sensitive_data(call_args, blacklist)

            logger.log(log_level, f"Starting {operation}", extra={"extra_fields": context})
            started = time.perf_counter()

            try:
                result = func(self, *args, **kwargs)
            except Exception as e:
                failure = dict(context,
                               status="failed",
                               error_type=type(e).__name__,
                               error_message=str(e),
                               duration_ms=round((time.perf_counter() - started) * 1000, 2))
                if deployment_settings.environment == "dev":
                    failure["stack_trace"] = traceback.format_exc()
                logger.log(error_level, f"Failed {operation}", extra={"extra_fields": failure})
                raise

            completed = dict(context,
                             status="completed",
                             duration_ms=round((time.perf_counter() - started) * 1000, 2))
            if include_result and result is not None:
                completed["result"] = _sanitize_sensitive_data(result, blacklist)
            logger.log(log_level, f"Completed {operation}", extra={"extra_fields": completed})
            return result

        return wrapper
    return decorator

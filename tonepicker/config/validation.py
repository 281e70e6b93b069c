"""Configuration validation utilities."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ConfigFieldError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class ConfigValidator:
    """Validates configuration parameters."""

    @staticmethod
    def validate_cache_params(params: dict[str, Any]) -> list[ConfigFieldError]:
        """Validate response cache parameters."""
        errors = []

        if "max_entries" in params:
            value = params["max_entries"]
            if not _is_int(value) or value <= 0:
                errors.append(ConfigFieldError(
                    field="cache.max_entries",
                    message="Must be a positive integer",
                    value=value
                ))

        if "ttl_seconds" in params:
            value = params["ttl_seconds"]
            if not _is_number(value) or value <= 0:
                errors.append(ConfigFieldError(
                    field="cache.ttl_seconds",
                    message="Must be a positive number",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_ratelimit_params(params: dict[str, Any]) -> list[ConfigFieldError]:
        """Validate admission controller parameters."""
        errors = []

        if "window_seconds" in params:
            value = params["window_seconds"]
            if not _is_number(value) or value <= 0:
                errors.append(ConfigFieldError(
                    field="ratelimit.window_seconds",
                    message="Must be a positive number",
                    value=value
                ))

        if "max_requests" in params:
            value = params["max_requests"]
            if not _is_int(value) or value <= 0:
                errors.append(ConfigFieldError(
                    field="ratelimit.max_requests",
                    message="Must be a positive integer",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_backend_params(params: dict[str, Any]) -> list[ConfigFieldError]:
        """Validate backend generation parameters."""
        errors = []

        if "api_url" in params:
            value = params["api_url"]
            if not isinstance(value, str) or not value.startswith(("http://", "https://")):
                errors.append(ConfigFieldError(
                    field="backend.api_url",
                    message="Must be an http(s) URL",
                    value=value
                ))

        if "temperature" in params:
            value = params["temperature"]
            if not _is_number(value) or value < 0 or value > 2:
                errors.append(ConfigFieldError(
                    field="backend.temperature",
                    message="Must be a number between 0 and 2",
                    value=value
                ))

        if "top_p" in params:
            value = params["top_p"]
            if not _is_number(value) or value <= 0 or value > 1:
                errors.append(ConfigFieldError(
                    field="backend.top_p",
                    message="Must be a positive number between 0 and 1",
                    value=value
                ))

        if "max_tokens" in params:
            value = params["max_tokens"]
            if not _is_int(value) or value <= 0:
                errors.append(ConfigFieldError(
                    field="backend.max_tokens",
                    message="Must be a positive integer",
                    value=value
                ))

        if "timeout_seconds" in params:
            value = params["timeout_seconds"]
            if not _is_number(value) or value <= 0:
                errors.append(ConfigFieldError(
                    field="backend.timeout_seconds",
                    message="Must be a positive number",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_config(config: dict[str, Any]) -> list[ConfigFieldError]:
        """Validate complete configuration."""
        errors = []

        if "cache" in config:
            errors.extend(ConfigValidator.validate_cache_params(config["cache"]))

        if "ratelimit" in config:
            errors.extend(ConfigValidator.validate_ratelimit_params(config["ratelimit"]))

        if "backend" in config:
            errors.extend(ConfigValidator.validate_backend_params(config["backend"]))

        return errors

"""
Pydantic model for application configuration.
Provides robust validation for all settings.
"""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

# Library section kinds the exporter knows how to traverse
SUPPORTED_KINDS = frozenset({"movie", "show"})


def default_run_tag() -> str:
    """Builds a run tag from the current local time."""
    return datetime.now().strftime("%Y%m%d-%H%M%S")


class ExportConfig(BaseModel):
    """A validated, immutable configuration for one export run."""

    # Server & Authentication
    server_address: str
    auth_token: str = Field(..., repr=False)

    # Export Settings
    export_root: str
    run_tag: str = Field(default_factory=default_run_tag)
    supported_kinds: frozenset[str] = SUPPORTED_KINDS

    # Transport Settings
    max_retries: int = 3
    retry_base_delay: float = 1.0
    request_timeout: float = 60.0

    # Reporting
    progress_interval: int = 10

    class Config:
        """Pydantic model configuration."""

        frozen = True
        str_strip_whitespace = True

    @field_validator("server_address")
    @classmethod
    def validate_server_address(cls, v: str) -> str:
        """Requires an http(s) URL and removes any trailing slash."""
        if not v:
            raise ValueError("Server address cannot be empty.")
        if not v.startswith(("http://", "https://")):
            raise ValueError(
                f"Server address must start with http:// or https://, got: {v}"
            )
        return v.rstrip("/")

    @field_validator("auth_token", "run_tag")
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("Value cannot be empty.")
        return v

    @field_validator("export_root")
    @classmethod
    def validate_export_root(cls, v: str) -> str:
        """Removes the trailing separator; catalog paths are appended as-is."""
        if not v:
            raise ValueError("Export root cannot be empty.")
        stripped = v.rstrip("/")
        # "/" itself strips to the empty string, meaning the filesystem root
        return stripped

    @field_validator("supported_kinds", mode="before")
    @classmethod
    def parse_supported_kinds(cls, v):
        """Accepts a comma separated string as well as any iterable of kinds."""
        if isinstance(v, str):
            v = [kind.strip() for kind in v.split(",")]
        kinds = frozenset(kind.lower() for kind in v if kind)
        unknown = kinds - SUPPORTED_KINDS
        if unknown:
            raise ValueError(
                f"Unsupported section kinds: {', '.join(sorted(unknown))}. "
                f"Choose from: {', '.join(sorted(SUPPORTED_KINDS))}."
            )
        if not kinds:
            raise ValueError("At least one section kind must be supported.")
        return kinds

    @field_validator("max_retries")
    @classmethod
    def validate_retries(cls, v: int) -> int:
        """Ensures a bounded number of retries."""
        if v < 0 or v > 10:
            raise ValueError("Max retries must be between 0 and 10.")
        return v

    @field_validator("retry_base_delay", "request_timeout")
    @classmethod
    def validate_non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("Durations cannot be negative.")
        return v

    @field_validator("progress_interval")
    @classmethod
    def validate_progress_interval(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Progress interval must be at least 1.")
        return v

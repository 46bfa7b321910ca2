"""
Loads and validates the run configuration from the process environment.
"""

import logging
import os
from pathlib import Path
from typing import Any, Mapping, Optional

from dotenv import load_dotenv
from pydantic import ValidationError

from plex_export.exceptions import ConfigurationError
from plex_export.models.config import ExportConfig

log = logging.getLogger(__name__)

# Environment variable -> ExportConfig field
ENV_KEYS = {
    "PLEX_ADDRESS": "server_address",
    "X_PLEX_TOKEN": "auth_token",
    "PLEX_ROOT_FOLDER": "export_root",
    "FILE_ENDING_PATTERN": "run_tag",
    "PLEX_SUPPORTED_KINDS": "supported_kinds",
    "PLEX_MAX_RETRIES": "max_retries",
    "PLEX_RETRY_DELAY": "retry_base_delay",
    "PLEX_REQUEST_TIMEOUT": "request_timeout",
    "PLEX_PROGRESS_INTERVAL": "progress_interval",
}

REQUIRED_KEYS = ("PLEX_ADDRESS", "X_PLEX_TOKEN", "PLEX_ROOT_FOLDER")


class ConfigManager:
    """Builds the immutable ExportConfig once at startup."""

    def __init__(
        self,
        env_file: Optional[Path] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        self.env_file = env_file
        self._environ = environ

    def _load_env_file(self) -> None:
        """Loads a .env file into the process environment without overriding it."""
        if self.env_file is not None:
            if not self.env_file.is_file():
                raise ConfigurationError(
                    f"Environment file not found at '{self.env_file}'."
                )
            load_dotenv(self.env_file, override=False)
            log.debug(f"Loaded environment file '{self.env_file}'.")
        else:
            load_dotenv(override=False)

    def _get_config_as_dict(self, environ: Mapping[str, str]) -> dict[str, Any]:
        """Maps the known environment variables onto model field names."""
        return {
            field: environ[key]
            for key, field in ENV_KEYS.items()
            if environ.get(key, "").strip()
        }

    def load_config(self) -> ExportConfig:
        """
        Reads the environment and validates it.

        Returns:
            A validated, frozen ExportConfig object.

        Raises:
            ConfigurationError: If a required variable is missing or validation fails.
        """
        if self._environ is None:
            self._load_env_file()
            environ: Mapping[str, str] = os.environ
        else:
            environ = self._environ

        missing = [key for key in REQUIRED_KEYS if not environ.get(key, "").strip()]
        if missing:
            raise ConfigurationError(
                f"Missing required environment variables: {', '.join(missing)}"
            )

        try:
            return ExportConfig(**self._get_config_as_dict(environ))
        except ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed:\n{e}") from e

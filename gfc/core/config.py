"""
Application configuration using pydantic-settings.
All environment variables are validated and typed.
"""

import base64
import binascii
import logging
import re
from typing import Literal

from pydantic import AliasChoices, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings

LogLevelName = Literal["debug", "info", "warning", "error", "critical"]


class Settings(BaseSettings):
    """Application settings loaded from GFC_* environment variables."""

    # HTTP listener
    port: int = 8080
    host: str = "0.0.0.0"

    # Event filtering
    allowed_repo_re: re.Pattern = re.compile(".*")
    git_use_ssh: bool = True
    main_ref: str = "refs/heads/main"

    # Per-repository config file, looked up in the checked-out tree
    repo_config_file: str = "gfc.yaml"

    # Secrets
    webhook_secret: SecretStr | None = None
    fly_token: SecretStr | None = None

    # SSH material (base64 encoded in the environment)
    ssh_private_key: SecretStr | None = None
    ssh_allowed_hosts: str | None = None
    ssh_key_fingerprint: str | None = Field(
        default=None,
        validation_alias=AliasChoices("GFC_SSH_KEY_FINGERPRINT", "GFC_SSH_FINGERPRINT"),
    )

    # Builds
    max_parallel_builds: int = Field(default=2, ge=1)
    disable_deploy: bool = False
    detach_deploy: bool = False

    log_level: LogLevelName = "info"

    @field_validator("ssh_private_key", "ssh_allowed_hosts", mode="before")
    @classmethod
    def _decode_base64(cls, value: str | None) -> str | None:
        if value is None:
            return None
        cleaned = str(value).strip()
        if not cleaned:
            return None
        try:
            return base64.b64decode(cleaned, validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as exc:
            raise ValueError("expected a base64 encoded value") from exc

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        cleaned = str(value).strip().lower()
        return "warning" if cleaned == "warn" else cleaned

    @field_validator("webhook_secret", "fly_token", "ssh_key_fingerprint", mode="before")
    @classmethod
    def _empty_as_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        cleaned = str(value).strip()
        return cleaned or None

    @property
    def log_level_value(self) -> int:
        """Get the logging module level for log_level."""
        return logging.getLevelName(self.log_level.upper())

    @property
    def clone_url_type(self) -> str:
        return "ssh" if self.git_use_ssh else "https"

    model_config = {
        "env_prefix": "GFC_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "frozen": True,
    }

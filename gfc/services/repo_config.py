"""
Optional per-repository configuration read before deploying.
"""

from pathlib import Path
from typing import Any

import yaml

from gfc.core.exceptions import RepoConfigError
from gfc.core.logging import get_logger

logger = get_logger(__name__)

# Recognized but not enforced yet
UNSUPPORTED_SECTIONS = ("certs", "secrets", "volumes")


class RepoConfigLoader:
    """Reads the repo config file from a checked-out tree."""

    def __init__(self, filename: str):
        self._filename = filename

    def load(self, repo_dir: Path) -> dict[str, Any] | None:
        """
        Parse the config file if the repository has one.

        Returns:
            The mapping, or None when the file is absent

        Raises:
            RepoConfigError: If the file is not a YAML mapping with string keys
            OSError: If the file exists but cannot be read
        """
        path = Path(repo_dir) / self._filename
        if not path.is_file():
            logger.debug(f"No repo config at {path}")
            return None

        logger.debug(f"Reading repo config {path}")
        text = path.read_text(encoding="utf-8", errors="replace")
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise RepoConfigError(f"{self._filename} is not valid YAML: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict) or not all(isinstance(k, str) for k in data):
            raise RepoConfigError(f"{self._filename} must be a mapping with string keys")
        return data

    def run(self, repo_dir: Path) -> dict[str, Any] | None:
        """Load the config and report sections that have no effect yet."""
        try:
            config = self.load(repo_dir)
        except RepoConfigError as e:
            logger.warning(f"Ignoring repo config: {e}")
            return None

        if config is None:
            return None

        for section in UNSUPPORTED_SECTIONS:
            if section in config:
                logger.warning(f"'{section}' section not yet supported")
        return config

"""
Process-wide runtime directory holding SSH material and the isolated home.
"""

import os
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path

from gfc.core.config import Settings
from gfc.core.logging import get_logger

logger = get_logger(__name__)

SSH_KEY_FILENAME = "gfc_ssh_key"
KNOWN_HOSTS_FILENAME = "known_hosts"
HOME_DIRNAME = "home"


@dataclass(frozen=True)
class RuntimePaths:
    """Files written once at startup and shared by every build."""

    root: Path
    home: Path
    ssh_key_file: Path | None = None
    known_hosts_file: Path | None = None

    def cleanup(self) -> None:
        """Remove the runtime directory and everything in it."""
        shutil.rmtree(self.root, ignore_errors=True)


def _write_private(path: Path, content: str) -> None:
    # Owner-only from creation, not chmod after the fact
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w") as f:
        f.write(content)
        if not content.endswith("\n"):
            f.write("\n")
    os.chmod(path, 0o600)


def prepare_runtime(settings: Settings, base_dir: str | None = None) -> RuntimePaths:
    """
    Create the runtime directory and write configured SSH material to it.

    Args:
        settings: Loaded application settings
        base_dir: Parent directory, defaults to the system temp dir

    Returns:
        Paths of the created files
    """
    root = Path(tempfile.mkdtemp(prefix="gfc-", dir=base_dir))
    home = root / HOME_DIRNAME
    home.mkdir(mode=0o700)

    ssh_key_file = None
    if settings.ssh_private_key is not None:
        ssh_key_file = root / SSH_KEY_FILENAME
        logger.info(f"Writing SSH key to file: {ssh_key_file}")
        _write_private(ssh_key_file, settings.ssh_private_key.get_secret_value())

    known_hosts_file = None
    if settings.ssh_allowed_hosts is not None:
        known_hosts_file = root / KNOWN_HOSTS_FILENAME
        logger.info(f"Writing SSH host keys to file: {known_hosts_file}")
        known_hosts_file.write_text(settings.ssh_allowed_hosts)

    return RuntimePaths(
        root=root,
        home=home,
        ssh_key_file=ssh_key_file,
        known_hosts_file=known_hosts_file,
    )

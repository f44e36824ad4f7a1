"""
Single-commit git checkout over a pinned SSH transport.
"""

import re
import shlex
from pathlib import Path

from gfc.core.exceptions import CheckoutError, CommandError
from gfc.core.logging import get_logger
from .process import Runner, minimal_env, run_checked

logger = get_logger(__name__)

_COMMIT_RE = re.compile(r"[0-9a-fA-F]{7,64}")


class GitCheckout:
    """Fetches exactly one commit into an empty directory."""

    def __init__(
        self,
        runner: Runner,
        home: Path,
        ssh_key_file: Path | None = None,
        known_hosts_file: Path | None = None,
        git: str = "git",
    ):
        self._runner = runner
        self._home = home
        self._ssh_key_file = ssh_key_file
        self._known_hosts_file = known_hosts_file
        self._git = git

    def ssh_command(self) -> str:
        """Build GIT_SSH_COMMAND with an explicit identity and host-key file."""
        # /dev/null as the only trust source makes every host unknown
        known_hosts = shlex.quote(str(self._known_hosts_file or "/dev/null"))
        parts = ["ssh"]
        if self._ssh_key_file is not None:
            parts += ["-i", shlex.quote(str(self._ssh_key_file))]
        parts += [
            "-F", "/dev/null",
            "-o", "IdentitiesOnly=yes",
            "-o", "BatchMode=yes",
            "-o", "StrictHostKeyChecking=yes",
            "-o", f"UserKnownHostsFile={known_hosts}",
            "-o", f"GlobalKnownHostsFile={known_hosts}",
        ]
        return " ".join(parts)

    def _env(self) -> dict[str, str]:
        return minimal_env(
            self._home,
            GIT_SSH_COMMAND=self.ssh_command(),
            GIT_TERMINAL_PROMPT="0",
            GIT_CONFIG_NOSYSTEM="1",
        )

    async def checkout(self, workdir: Path, url: str, commit: str) -> None:
        """
        Fetch a commit from a remote and check it out into workdir.

        Args:
            workdir: Existing empty directory
            url: Remote repository URL
            commit: Full or abbreviated commit SHA

        Raises:
            CheckoutError: On invalid arguments or any failed git step
        """
        if not workdir:
            raise CheckoutError("checkout called with no directory")
        if not url:
            raise CheckoutError("checkout called with no repository URL")
        if not commit:
            raise CheckoutError("checkout called with no commit")
        if url.startswith("-"):
            raise CheckoutError("repository URL must not start with '-'")
        if not _COMMIT_RE.fullmatch(commit):
            raise CheckoutError(f"not a commit SHA: {commit!r}")
        if set(commit) == {"0"}:
            raise CheckoutError("all-zero commit SHA names no commit")

        env = self._env()
        steps = [
            ("init", [self._git, "init", "--quiet", str(workdir)]),
            ("remote add", [self._git, "remote", "add", "origin", url]),
            ("fetch", [self._git, "fetch", "--quiet", "--depth", "1", "origin", commit]),
            ("checkout", [self._git, "checkout", "--quiet", "FETCH_HEAD"]),
        ]
        for name, args in steps:
            try:
                await run_checked(self._runner, args, cwd=workdir, env=env)
            except CommandError as e:
                raise CheckoutError(f"git {name} failed: {e}") from e

        logger.debug(f"Checked out {commit} into {workdir}")

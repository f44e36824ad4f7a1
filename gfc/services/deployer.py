"""
Fly.io deployment of a checked-out tree.
"""

from enum import Enum
from pathlib import Path
from typing import Sequence

from gfc.core.exceptions import CommandError, DeployError
from gfc.core.logging import get_logger
from .process import Runner, minimal_env, run_checked

logger = get_logger(__name__)

DEFAULT_DEPLOY_COMMAND = ("fly", "deploy", "--remote-only")


class DeployStatus(str, Enum):
    DEPLOYED = "deployed"
    SKIPPED = "skipped"


class FlyDeployer:
    """Runs the deploy command with a token and nothing else from the host."""

    def __init__(
        self,
        runner: Runner,
        home: Path,
        token: str | None,
        disabled: bool = False,
        command: Sequence[str] = DEFAULT_DEPLOY_COMMAND,
    ):
        self._runner = runner
        self._home = home
        self._token = token
        self._disabled = disabled
        self._command = list(command)

    @property
    def disabled(self) -> bool:
        return self._disabled

    async def deploy(self, workdir: Path) -> DeployStatus:
        """
        Deploy the application in workdir.

        Returns:
            SKIPPED when deploys are disabled, DEPLOYED otherwise

        Raises:
            DeployError: If the deploy command fails
        """
        if not workdir:
            raise DeployError("deploy called with no directory")

        if self._disabled:
            logger.info("Skipping deployment since GFC_DISABLE_DEPLOY is set.")
            return DeployStatus.SKIPPED

        extra = {"FLY_API_TOKEN": self._token} if self._token else {}
        env = minimal_env(self._home, **extra)
        try:
            await run_checked(self._runner, self._command, cwd=workdir, env=env)
        except CommandError as e:
            raise DeployError(f"deploy failed: {e}") from e
        return DeployStatus.DEPLOYED

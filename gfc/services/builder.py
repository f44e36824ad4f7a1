"""
Build orchestration: checkout, pre-deploy steps and deploy in a throwaway directory.
"""

import asyncio
import shutil
import tempfile
from pathlib import Path

from gfc.core.exceptions import CheckoutError, DeployError
from gfc.core.logging import get_logger
from gfc.models.outcome import BuildOutcome, BuildStatus
from .checkout import GitCheckout
from .deployer import DeployStatus, FlyDeployer
from .repo_config import RepoConfigLoader

logger = get_logger(__name__)


class BuildOrchestrator:
    """
    Runs one build per call.

    In detach mode the deploy step continues in a background task after
    build() returns. The caller only learns that the deploy started: deploy
    failures are logged but never reported, and the admission slot held by
    the caller is already released while the deploy still runs. This avoids
    webhook timeouts on long deploys.
    """

    def __init__(
        self,
        checkout: GitCheckout,
        config_loader: RepoConfigLoader,
        deployer: FlyDeployer,
        detach: bool = False,
    ):
        self._checkout = checkout
        self._config_loader = config_loader
        self._deployer = deployer
        self._detach = detach
        self._background: set[asyncio.Task] = set()

    async def build(self, repo_url: str, commit: str) -> BuildOutcome:
        """
        Check out and deploy one commit.

        Args:
            repo_url: Remote repository URL
            commit: Commit SHA to deploy

        Returns:
            Outcome naming the failed step, if any
        """
        if not repo_url:
            raise ValueError("build called with no repo_url")
        if not commit:
            raise ValueError("build called with no commit")

        context = {"repo_url": repo_url, "commit": commit}
        workdir = Path(tempfile.mkdtemp(prefix="gfc-build-"))
        handed_off = False
        try:
            try:
                await self._checkout.checkout(workdir, repo_url, commit)
            except CheckoutError as e:
                logger.error(f"Error checking out commit: {e} {context}")
                return BuildOutcome(BuildStatus.CHECKOUT_FAILED, "Build failed during checkout")

            try:
                self._config_loader.run(workdir)
            except OSError as e:
                logger.error(f"Error reading repo config: {e} {context}")
                return BuildOutcome(BuildStatus.CONFIG_ERROR, "Build failed reading repo config")

            if self._detach and not self._deployer.disabled:
                task = asyncio.create_task(self._deploy_detached(workdir, context))
                self._background.add(task)
                task.add_done_callback(self._background.discard)
                handed_off = True
                logger.info(f"Deploy started in background {context}")
                return BuildOutcome(BuildStatus.DEPLOY_DETACHED, "Deploy started")

            try:
                status = await self._deployer.deploy(workdir)
            except DeployError as e:
                logger.error(f"Error deploying commit: {e} {context}")
                return BuildOutcome(BuildStatus.DEPLOY_FAILED, "Build failed during deploy")

            if status == DeployStatus.SKIPPED:
                return BuildOutcome(BuildStatus.SKIPPED_DEPLOY, "Checkout succeeded, deploy skipped")
            logger.info(f"Build succeeded! {context}")
            return BuildOutcome(BuildStatus.SUCCESS, "Build succeeded")
        finally:
            if not handed_off:
                _remove_workdir(workdir)

    async def _deploy_detached(self, workdir: Path, context: dict) -> None:
        try:
            await self._deployer.deploy(workdir)
            logger.info(f"Background deploy succeeded {context}")
        except DeployError as e:
            logger.error(f"Background deploy failed: {e} {context}")
        except Exception:
            logger.exception(f"Background deploy crashed {context}")
        finally:
            _remove_workdir(workdir)

    @property
    def pending(self) -> int:
        """Number of detached deploys still running."""
        return len(self._background)

    async def drain(self) -> None:
        """Wait for detached deploys to finish."""
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)


def _remove_workdir(workdir: Path) -> None:
    shutil.rmtree(workdir, ignore_errors=True)
    if workdir.exists():
        logger.error(f"Could not remove working directory {workdir}")

# Services module - checkout, repo config, deploy and build orchestration
from .builder import BuildOrchestrator
from .checkout import GitCheckout
from .deployer import DeployStatus, FlyDeployer
from .process import ProcessResult, ProcessRunner
from .repo_config import RepoConfigLoader

__all__ = [
    "BuildOrchestrator",
    "DeployStatus",
    "FlyDeployer",
    "GitCheckout",
    "ProcessResult",
    "ProcessRunner",
    "RepoConfigLoader",
]

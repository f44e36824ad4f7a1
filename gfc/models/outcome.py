"""
Result of one admitted build.
"""

from dataclasses import dataclass
from enum import Enum


class BuildStatus(str, Enum):
    SUCCESS = "success"
    CHECKOUT_FAILED = "checkout_failed"
    CONFIG_ERROR = "config_error"
    DEPLOY_FAILED = "deploy_failed"
    SKIPPED_DEPLOY = "skipped_deploy"
    DEPLOY_DETACHED = "deploy_detached"


_OK_STATUSES = frozenset(
    {BuildStatus.SUCCESS, BuildStatus.SKIPPED_DEPLOY, BuildStatus.DEPLOY_DETACHED}
)


@dataclass(frozen=True)
class BuildOutcome:
    """Build status plus a caller-safe message."""

    status: BuildStatus
    message: str

    @property
    def ok(self) -> bool:
        return self.status in _OK_STATUSES

    @property
    def http_status(self) -> int:
        """HTTP status code reported to the webhook sender."""
        return 200 if self.ok else 500

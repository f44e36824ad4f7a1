"""
Custom application exceptions.
"""


class GfcError(Exception):
    """Base exception for connector errors."""
    pass


class CommandError(GfcError):
    """External command could not be started or exited non-zero.

    Captured output is kept on the instance for debug logging only and is
    never part of the message, since it may contain secrets.
    """

    def __init__(self, program: str, exit_code: int | None, stdout: str = "", stderr: str = ""):
        if exit_code is None:
            message = f"{program} could not be started"
        else:
            message = f"{program} exited with code {exit_code}"
        super().__init__(message)
        self.program = program
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr


class BuildError(GfcError):
    """A build step failed."""

    step = "build"


class CheckoutError(BuildError):
    """Fetching or checking out the commit failed."""

    step = "checkout"


class DeployError(BuildError):
    """The deployment command failed."""

    step = "deploy"


class RepoConfigError(GfcError):
    """Per-repository config file is malformed."""
    pass


class WebhookPayloadError(GfcError):
    """Webhook body is not a usable event payload."""
    pass


class AdmissionRejected(GfcError):
    """No build slot is available."""
    pass

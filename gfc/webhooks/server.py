"""
Webhook server setup.
"""

from aiohttp import web

from gfc.core.config import Settings
from gfc.core.logging import get_logger
from gfc.core.runtime import RuntimePaths
from gfc.services.builder import BuildOrchestrator
from gfc.services.checkout import GitCheckout
from gfc.services.deployer import FlyDeployer
from gfc.services.process import ProcessRunner, Runner
from gfc.services.repo_config import RepoConfigLoader
from gfc.state.admission import AdmissionController
from .context import CONTEXT_KEY, WebhookContext
from .handler import handle_push
from .middleware import authenticator, body_reader, error_catcher, request_logger

logger = get_logger(__name__)

MIDDLEWARES = (request_logger, error_catcher, body_reader, authenticator)


def build_orchestrator(settings: Settings, runtime: RuntimePaths, runner: Runner) -> BuildOrchestrator:
    """Wire checkout, repo config and deployer from settings."""
    token = settings.fly_token.get_secret_value() if settings.fly_token is not None else None
    return BuildOrchestrator(
        checkout=GitCheckout(
            runner,
            home=runtime.home,
            ssh_key_file=runtime.ssh_key_file,
            known_hosts_file=runtime.known_hosts_file,
        ),
        config_loader=RepoConfigLoader(settings.repo_config_file),
        deployer=FlyDeployer(
            runner,
            home=runtime.home,
            token=token,
            disabled=settings.disable_deploy,
        ),
        detach=settings.detach_deploy,
    )


def create_webhook_app(
    settings: Settings,
    runtime: RuntimePaths,
    dev_mode: bool = False,
    runner: Runner | None = None,
) -> web.Application:
    """
    Create the aiohttp application.

    Args:
        settings: Loaded application settings
        runtime: Startup files (SSH key, known hosts, home)
        dev_mode: Disable signature checks
        runner: Process runner, a real one unless given
    """
    orchestrator = build_orchestrator(settings, runtime, runner or ProcessRunner())
    context = WebhookContext(
        settings=settings,
        admission=AdmissionController(settings.max_parallel_builds),
        orchestrator=orchestrator,
        dev_mode=dev_mode,
    )

    app = web.Application(middlewares=list(MIDDLEWARES))
    app[CONTEXT_KEY] = context
    app.router.add_post("/{tail:.*}", handle_push)

    async def _drain_background(app: web.Application) -> None:
        await app[CONTEXT_KEY].orchestrator.drain()

    app.on_cleanup.append(_drain_background)
    return app


async def start_webhook_server(app: web.Application, host: str = "0.0.0.0", port: int = 8080) -> web.AppRunner:
    """
    Start the webhook server.

    Args:
        app: Application from create_webhook_app
        host: Host to bind to
        port: Port to bind to

    Returns:
        The runner, to be cleaned up on shutdown
    """
    runner = web.AppRunner(app)
    await runner.setup()

    site = web.TCPSite(runner, host, port)
    await site.start()

    logger.info(f"Webhook server started on {host}:{port}")
    return runner

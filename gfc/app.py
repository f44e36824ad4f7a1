"""
Application startup and main entry point.
"""

import asyncio
import sys

from pydantic import ValidationError

from gfc.core.config import Settings
from gfc.core.logging import get_logger, setup_logging
from gfc.core.runtime import prepare_runtime
from gfc.webhooks.server import create_webhook_app, start_webhook_server

logger = get_logger(__name__)


def _is_set(value) -> str:
    return "set" if value is not None else "NOT SET"


def log_settings(settings: Settings, dev_mode: bool = False) -> None:
    """Log effective configuration. Secrets are reported as set/NOT SET only."""
    lines = [
        "== gitea-fly-connector ==",
        "Config settings:",
        f"           Server Port: {settings.port}",
        f"         Ref to deploy: {settings.main_ref}",
        f"  Allowed repositories: {settings.allowed_repo_re.pattern}",
        f"        Clone URL type: {settings.clone_url_type}",
        f"  Repo config filename: {settings.repo_config_file}",
        f"   Max parallel builds: {settings.max_parallel_builds}",
        f"       Deploys enabled: {not settings.disable_deploy}",
        f"      Detached deploys: {settings.detach_deploy}",
        f"             Log level: {settings.log_level}",
        "Secrets:",
        f"         Fly API Token: {_is_set(settings.fly_token)}",
        f"  Gitea Webhook secret: {_is_set(settings.webhook_secret)}",
        f"       SSH private key: {_is_set(settings.ssh_private_key)}",
        f"       SSH fingerprint: {settings.ssh_key_fingerprint or 'NOT SET'}",
        f"     SSH allowed hosts: {_is_set(settings.ssh_allowed_hosts)}",
    ]
    for line in lines:
        logger.info(line)

    if dev_mode:
        logger.warning("Development mode: webhook signatures are NOT checked")
    elif settings.webhook_secret is None:
        logger.warning("GFC_WEBHOOK_SECRET is not set, every webhook will be rejected")


async def main(dev_mode: bool = False) -> None:
    """Main application entry point."""
    try:
        settings = Settings()
    except ValidationError as e:
        setup_logging()
        logger.error(f"Invalid configuration:\n{e}")
        sys.exit(1)
    setup_logging(settings.log_level_value)
    log_settings(settings, dev_mode)

    runtime = prepare_runtime(settings)
    runner = None
    try:
        app = create_webhook_app(settings, runtime, dev_mode=dev_mode)
        runner = await start_webhook_server(app, settings.host, settings.port)

        # Keep running until cancelled
        stop_signal = asyncio.Event()
        await stop_signal.wait()
    except asyncio.CancelledError:
        pass
    finally:
        if runner is not None:
            await runner.cleanup()
        runtime.cleanup()

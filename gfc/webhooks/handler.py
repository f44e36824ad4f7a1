"""
Core webhook handler: parse, filter, admit, build.
"""

from aiohttp import web

from gfc.core.exceptions import AdmissionRejected, WebhookPayloadError
from gfc.core.logging import get_logger
from .context import CONTEXT_KEY
from .events import apply_filters, is_deleted_ref, parse_event
from .middleware import BODY_KEY

logger = get_logger(__name__)


async def handle_push(request: web.Request) -> web.Response:
    """Handle a Gitea webhook delivery."""
    context = request.app[CONTEXT_KEY]
    settings = context.settings

    try:
        event = parse_event(request[BODY_KEY], request.headers, settings.git_use_ssh)
    except WebhookPayloadError as e:
        logger.warning(f"Rejected webhook payload: {e}")
        return web.Response(status=400, text="Malformed webhook payload")

    logger.info(f"Processing webhook {event.log_context()}")

    rejection = apply_filters(event, settings)
    if rejection is not None:
        return web.Response(status=rejection.status, text=rejection.reason)

    if event.commit is None:
        logger.warning(f"Push event without commit {event.log_context()}")
        return web.Response(status=400, text="Missing commit")

    if is_deleted_ref(event.commit):
        logger.info(f"Build skipped: ref was deleted {event.log_context()}")
        return web.Response(status=200, text="Nothing to do for a deleted ref")

    try:
        with context.admission.reserved():
            outcome = await context.orchestrator.build(event.repo_url, event.commit)
    except AdmissionRejected:
        logger.debug(
            f"Build skipped: max parallel builds reached "
            f"(current={context.admission.in_use}, max={context.admission.capacity})"
        )
        return web.Response(status=429, text="Too many builds in progress, try again later")

    return web.Response(status=outcome.http_status, text=outcome.message)

"""
Request pipeline: logging, catch-all, body materialization and authentication.

Registered outermost first, see server.MIDDLEWARES.
"""

from aiohttp import web

from gfc.core.logging import get_logger
from .auth import SIGNATURE_HEADER, verify_signature
from .context import CONTEXT_KEY

logger = get_logger(__name__)

BODY_KEY = "body"


@web.middleware
async def request_logger(request: web.Request, handler) -> web.StreamResponse:
    """Log each request and the status it finally got."""
    logger.info(
        f"Starting request {request.method} {request.path} "
        f"from {request.remote} (content_length={request.content_length})"
    )
    try:
        response = await handler(request)
    except web.HTTPException as e:
        logger.info(f"Finished request status={e.status}")
        raise
    logger.info(f"Finished request status={response.status}")
    return response


@web.middleware
async def error_catcher(request: web.Request, handler) -> web.StreamResponse:
    """Turn unexpected exceptions into a plain 500 instead of a crash."""
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except Exception:
        logger.exception("Unhandled error while processing webhook")
        return web.Response(status=500, text="Internal Server Error")


@web.middleware
async def body_reader(request: web.Request, handler) -> web.StreamResponse:
    """Read the whole payload before anything looks at it."""
    request[BODY_KEY] = await request.read()
    return await handler(request)


@web.middleware
async def authenticator(request: web.Request, handler) -> web.StreamResponse:
    """Reject requests whose signature does not match the webhook secret."""
    context = request.app[CONTEXT_KEY]
    if context.dev_mode:
        return await handler(request)

    secret = context.settings.webhook_secret
    authenticated = verify_signature(
        request[BODY_KEY],
        request.headers.get(SIGNATURE_HEADER),
        secret.get_secret_value() if secret is not None else None,
    )
    if not authenticated:
        logger.debug("Auth failure: signature missing or doesn't match")
        return web.Response(status=400, text="Invalid signature")
    return await handler(request)

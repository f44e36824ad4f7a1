"""
Webhook payload parsing and the event filter chain.
"""

import json
from dataclasses import dataclass
from typing import Callable, Mapping

from gfc.core.config import Settings
from gfc.core.exceptions import WebhookPayloadError
from gfc.core.logging import get_logger
from gfc.models.event import WebhookEvent

logger = get_logger(__name__)

EVENT_TYPE_HEADER = "X-Gitea-Event-Type"
DELIVERY_HEADER = "X-Gitea-Delivery"
PUSH_EVENT = "push"


def is_deleted_ref(commit: str | None) -> bool:
    """Gitea reports a deleted branch as a push whose after is all zeros."""
    return bool(commit) and set(commit) == {"0"}


def _optional_str(value) -> str | None:
    return value if isinstance(value, str) and value else None


def parse_event(body: bytes, headers: Mapping[str, str], use_ssh: bool) -> WebhookEvent:
    """
    Build a WebhookEvent from a Gitea push payload.

    Args:
        body: Raw JSON body
        headers: Request headers
        use_ssh: Read repository.ssh_url instead of repository.clone_url

    Raises:
        WebhookPayloadError: If the body is not a JSON object or has no repository URL
    """
    try:
        payload = json.loads(body)
    except (ValueError, UnicodeDecodeError) as e:
        raise WebhookPayloadError(f"body is not valid JSON: {e}") from e

    if not isinstance(payload, dict):
        raise WebhookPayloadError("body is not a JSON object")

    repository = payload.get("repository")
    url_key = "ssh_url" if use_ssh else "clone_url"
    repo_url = _optional_str(repository.get(url_key)) if isinstance(repository, dict) else None
    if repo_url is None:
        raise WebhookPayloadError(f"payload has no repository.{url_key}")

    return WebhookEvent(
        repo_url=repo_url,
        commit=_optional_str(payload.get("after")),
        ref=_optional_str(payload.get("ref")),
        event_type=headers.get(EVENT_TYPE_HEADER),
        delivery_id=headers.get(DELIVERY_HEADER),
    )


@dataclass(frozen=True)
class Rejection:
    """Why an event does not lead to a build, and what to answer."""

    status: int
    reason: str


def check_repository(event: WebhookEvent, settings: Settings) -> Rejection | None:
    if settings.allowed_repo_re.fullmatch(event.repo_url) is None:
        logger.debug(
            f"Build skipped: repo URL not allowed "
            f"(allowed={settings.allowed_repo_re.pattern!r}, repo_url={event.repo_url!r})"
        )
        return Rejection(400, "Repository not allowed")
    return None


def check_event_type(event: WebhookEvent, settings: Settings) -> Rejection | None:
    if event.event_type != PUSH_EVENT:
        logger.debug(f"Build skipped: unsupported event type {event.event_type!r}")
        return Rejection(200, "Nothing to do for this event type")
    return None


def check_ref(event: WebhookEvent, settings: Settings) -> Rejection | None:
    if event.ref != settings.main_ref:
        logger.debug(f"Build skipped: non-deployable ref {event.ref!r} (deployable={settings.main_ref!r})")
        return Rejection(200, "Nothing to do for this ref")
    return None


EventFilter = Callable[[WebhookEvent, Settings], Rejection | None]

# Order matters: the first rejection stops the chain
DEFAULT_FILTERS: tuple[EventFilter, ...] = (check_repository, check_event_type, check_ref)


def apply_filters(
    event: WebhookEvent,
    settings: Settings,
    filters: tuple[EventFilter, ...] = DEFAULT_FILTERS,
) -> Rejection | None:
    """Run filters in order and return the first rejection, or None to build."""
    for event_filter in filters:
        rejection = event_filter(event, settings)
        if rejection is not None:
            return rejection
    return None

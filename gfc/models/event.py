"""
Data model for a single inbound webhook event.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class WebhookEvent:
    """Push notification fields the connector acts on."""

    repo_url: str
    commit: str | None
    ref: str | None
    event_type: str | None
    delivery_id: str | None = None

    def log_context(self) -> dict:
        """Fields safe to include in log records."""
        return {
            "repo_url": self.repo_url,
            "commit": self.commit,
            "ref": self.ref,
            "event": self.event_type,
            "delivery_id": self.delivery_id,
        }

"""
Objects shared by every request of one server instance.
"""

from dataclasses import dataclass

from aiohttp import web

from gfc.core.config import Settings
from gfc.services.builder import BuildOrchestrator
from gfc.state.admission import AdmissionController


@dataclass(frozen=True)
class WebhookContext:
    settings: Settings
    admission: AdmissionController
    orchestrator: BuildOrchestrator
    # Only set from the --dev command line flag, never from the environment
    dev_mode: bool = False


CONTEXT_KEY = web.AppKey("context", WebhookContext)

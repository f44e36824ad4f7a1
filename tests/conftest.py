"""
Pytest configuration and shared fixtures.
"""

import asyncio
import json
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from gfc.services.process import ProcessResult  # noqa: E402

TEST_SECRET = "test_secret"
REPO_SSH_URL = "git@git.example.com:team/app.git"
REPO_CLONE_URL = "https://git.example.com/team/app.git"
COMMIT = "0123456789abcdef0123456789abcdef01234567"


# ============================================================================
# Environment Fixtures
# ============================================================================

@pytest.fixture(autouse=True)
def mock_env(monkeypatch):
    """Start every test from a known GFC_* environment."""
    for name in list(os.environ):
        if name.startswith("GFC_"):
            monkeypatch.delenv(name)
    monkeypatch.setenv("GFC_WEBHOOK_SECRET", TEST_SECRET)
    monkeypatch.setenv("GFC_FLY_TOKEN", "fly_test_token")


@pytest.fixture
def settings():
    """Settings built from the test environment."""
    from gfc.core.config import Settings
    return Settings(_env_file=None)


@pytest.fixture
def make_settings():
    """Build Settings with overrides."""
    from gfc.core.config import Settings

    def _make(**overrides):
        return Settings(_env_file=None, **overrides)

    return _make


@pytest.fixture
def runtime(settings, tmp_path):
    """Runtime directory under pytest's tmp_path."""
    from gfc.core.runtime import prepare_runtime
    paths = prepare_runtime(settings, base_dir=str(tmp_path))
    yield paths
    paths.cleanup()


# ============================================================================
# Process Fakes
# ============================================================================

@dataclass
class Call:
    args: list[str]
    cwd: Path | None
    env: dict[str, str]

    @property
    def command(self) -> str:
        return " ".join(self.args)


@dataclass
class FakeRunner:
    """Records commands instead of running them."""

    calls: list[Call] = field(default_factory=list)
    failures: dict[str, ProcessResult] = field(default_factory=dict)
    gates: dict[str, tuple[asyncio.Event, asyncio.Event]] = field(default_factory=dict)

    def fail(self, prefix: str, exit_code: int = 1, stderr: str = "fatal: error") -> None:
        """Make commands starting with prefix exit non-zero."""
        self.failures[prefix] = ProcessResult(exit_code=exit_code, stdout="", stderr=stderr)

    def block(self, prefix: str) -> tuple[asyncio.Event, asyncio.Event]:
        """Make commands starting with prefix wait; returns (started, release)."""
        gate = (asyncio.Event(), asyncio.Event())
        self.gates[prefix] = gate
        return gate

    def commands(self) -> list[str]:
        return [call.command for call in self.calls]

    async def run(self, args, *, cwd=None, env=None) -> ProcessResult:
        call = Call(list(args), cwd, dict(env or {}))
        self.calls.append(call)
        for prefix, (started, release) in self.gates.items():
            if call.command.startswith(prefix):
                started.set()
                await release.wait()
        for prefix, result in self.failures.items():
            if call.command.startswith(prefix):
                return result
        return ProcessResult(exit_code=0, stdout="", stderr="")


@pytest.fixture
def fake_runner():
    return FakeRunner()


# ============================================================================
# Webhook Fixtures
# ============================================================================

@pytest.fixture
def push_body():
    """Build a Gitea push payload as bytes."""

    def _make(ref="refs/heads/main", commit=COMMIT, ssh_url=REPO_SSH_URL, clone_url=REPO_CLONE_URL):
        payload = {
            "ref": ref,
            "before": "0" * 40,
            "after": commit,
            "repository": {
                "full_name": "team/app",
                "ssh_url": ssh_url,
                "clone_url": clone_url,
            },
        }
        return json.dumps(payload).encode()

    return _make


@pytest.fixture
def signed_headers():
    """Headers for a webhook delivery signed with the test secret."""
    from gfc.webhooks.auth import compute_signature

    def _make(body: bytes, event="push", secret=TEST_SECRET):
        return {
            "Content-Type": "application/json",
            "X-Gitea-Event-Type": event,
            "X-Gitea-Delivery": "d1b2c3",
            "X-Gitea-Signature": compute_signature(secret, body),
        }

    return _make

"""
Tests for core.config module.
"""

import base64
import logging

import pytest
from pydantic import ValidationError


def _b64(text: str) -> str:
    return base64.b64encode(text.encode()).decode()


class TestSettings:
    """Tests for Settings class."""

    def test_default_values(self, settings):
        """Test that default values are set correctly."""
        assert settings.port == 8080
        assert settings.allowed_repo_re.pattern == ".*"
        assert settings.git_use_ssh is True
        assert settings.main_ref == "refs/heads/main"
        assert settings.repo_config_file == "gfc.yaml"
        assert settings.max_parallel_builds == 2
        assert settings.disable_deploy is False
        assert settings.detach_deploy is False
        assert settings.log_level == "info"
        assert settings.ssh_private_key is None
        assert settings.ssh_allowed_hosts is None

    def test_secrets_loaded(self, settings):
        """Test that secrets come from GFC_* variables and stay masked."""
        assert settings.webhook_secret.get_secret_value() == "test_secret"
        assert settings.fly_token.get_secret_value() == "fly_test_token"
        assert "test_secret" not in repr(settings)

    def test_env_overrides(self, monkeypatch):
        """Test typed parsing of environment values."""
        monkeypatch.setenv("GFC_PORT", "9000")
        monkeypatch.setenv("GFC_GIT_USE_SSH", "false")
        monkeypatch.setenv("GFC_MAIN_REF", "refs/heads/release")
        monkeypatch.setenv("GFC_MAX_PARALLEL_BUILDS", "5")
        monkeypatch.setenv("GFC_DISABLE_DEPLOY", "true")
        monkeypatch.setenv("GFC_DETACH_DEPLOY", "1")

        from gfc.core.config import Settings
        settings = Settings(_env_file=None)

        assert settings.port == 9000
        assert settings.git_use_ssh is False
        assert settings.clone_url_type == "https"
        assert settings.main_ref == "refs/heads/release"
        assert settings.max_parallel_builds == 5
        assert settings.disable_deploy is True
        assert settings.detach_deploy is True

    def test_allowed_repo_re_compiled(self, monkeypatch):
        """Test that the allow-pattern is compiled at load time."""
        monkeypatch.setenv("GFC_ALLOWED_REPO_RE", r"git@git\.example\.com:team/.*")

        from gfc.core.config import Settings
        settings = Settings(_env_file=None)

        assert settings.allowed_repo_re.fullmatch("git@git.example.com:team/app.git")
        assert not settings.allowed_repo_re.fullmatch("git@evil.com:team/app.git")

    def test_invalid_regex_fails_fast(self, monkeypatch):
        """Test that a broken allow-pattern is a startup error."""
        monkeypatch.setenv("GFC_ALLOWED_REPO_RE", "([unclosed")

        from gfc.core.config import Settings
        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_zero_parallel_builds_rejected(self, monkeypatch):
        """Test that capacity must allow at least one build."""
        monkeypatch.setenv("GFC_MAX_PARALLEL_BUILDS", "0")

        from gfc.core.config import Settings
        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_base64_ssh_material_decoded(self, monkeypatch):
        """Test SSH key and host keys are decoded from base64."""
        monkeypatch.setenv("GFC_SSH_PRIVATE_KEY", _b64("-----BEGIN KEY-----\nabc\n"))
        monkeypatch.setenv("GFC_SSH_ALLOWED_HOSTS", _b64("git.example.com ssh-ed25519 AAAA\n"))

        from gfc.core.config import Settings
        settings = Settings(_env_file=None)

        assert settings.ssh_private_key.get_secret_value() == "-----BEGIN KEY-----\nabc\n"
        assert settings.ssh_allowed_hosts == "git.example.com ssh-ed25519 AAAA\n"

    def test_invalid_base64_rejected(self, monkeypatch):
        """Test that non-base64 key material fails validation."""
        monkeypatch.setenv("GFC_SSH_PRIVATE_KEY", "not base64!!")

        from gfc.core.config import Settings
        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_fingerprint_accepts_both_names(self, monkeypatch):
        """Test both fingerprint variable names are read."""
        monkeypatch.setenv("GFC_SSH_FINGERPRINT", "256 SHA256:abc deploy")

        from gfc.core.config import Settings
        assert Settings(_env_file=None).ssh_key_fingerprint == "256 SHA256:abc deploy"

        monkeypatch.setenv("GFC_SSH_KEY_FINGERPRINT", "256 SHA256:def deploy")
        assert Settings(_env_file=None).ssh_key_fingerprint == "256 SHA256:def deploy"

    def test_empty_secret_is_unset(self, monkeypatch):
        """Test empty GFC_WEBHOOK_SECRET counts as not configured."""
        monkeypatch.setenv("GFC_WEBHOOK_SECRET", "")

        from gfc.core.config import Settings
        assert Settings(_env_file=None).webhook_secret is None

    @pytest.mark.parametrize(
        "raw, expected",
        [("debug", logging.DEBUG), ("INFO", logging.INFO), ("warn", logging.WARNING), ("error", logging.ERROR)],
    )
    def test_log_level(self, monkeypatch, raw, expected):
        """Test log level names map to logging levels."""
        monkeypatch.setenv("GFC_LOG_LEVEL", raw)

        from gfc.core.config import Settings
        assert Settings(_env_file=None).log_level_value == expected

    def test_unknown_log_level_rejected(self, monkeypatch):
        """Test that an unknown log level fails validation."""
        monkeypatch.setenv("GFC_LOG_LEVEL", "chatty")

        from gfc.core.config import Settings
        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_settings_are_frozen(self, settings):
        """Test that settings cannot change after startup."""
        with pytest.raises(ValidationError):
            settings.port = 1234

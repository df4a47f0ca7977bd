"""Tests for the Secret Manager client."""

import os
from unittest.mock import MagicMock, patch

from quakewatch.shell.secret_manager_client import SecretManagerClient, SecretManagerConfig


def _client_with_secret(value):
    client = SecretManagerClient(SecretManagerConfig(project_id="proj"))
    mock = MagicMock()
    mock.access_secret_version.return_value.payload.data = value.encode("UTF-8")
    client._client = mock
    return client, mock


class TestGetSecret:
    """Tests for SecretManagerClient.get_secret()."""

    def test_fetches_latest_version(self):
        client, mock = _client_with_secret("s3cret")

        assert client.get_secret("gemini") == "s3cret"
        mock.access_secret_version.assert_called_once_with(
            request={"name": "projects/proj/secrets/gemini/versions/latest"}
        )

    def test_no_project_returns_none(self):
        assert SecretManagerClient().get_secret("gemini") is None

    def test_error_returns_none(self):
        client, mock = _client_with_secret("x")
        mock.access_secret_version.side_effect = Exception("not found")

        assert client.get_secret("gemini") is None


class TestResolve:
    """Tests for SecretManagerClient.resolve()."""

    def test_plain_value(self):
        client, _ = _client_with_secret("x")
        assert client.resolve("plain") == "plain"

    def test_secret_placeholder(self):
        client, _ = _client_with_secret("s3cret")
        assert client.resolve("${secret:gemini}") == "s3cret"

    def test_unresolved_secret_keeps_placeholder(self):
        client, mock = _client_with_secret("x")
        mock.access_secret_version.side_effect = Exception("not found")

        assert client.resolve("${secret:gemini}") == "${secret:gemini}"

    def test_env_placeholder(self):
        client, _ = _client_with_secret("x")

        with patch.dict(os.environ, {"GEMINI_API_KEY": "env-key"}):
            assert client.resolve("${GEMINI_API_KEY}") == "env-key"

"""Tests for signalfeed.core.credentials."""

from __future__ import annotations

import os
from pathlib import Path
from unittest import mock

from signalfeed.core.credentials import BackendCredentials, UserSession

_NO_KEYRING = mock.patch("keyring.get_password", return_value=None)


class TestIsValid:
    def test_valid(self) -> None:
        c = BackendCredentials(url="https://x.example", anon_key="anon")
        assert c.is_valid is True

    def test_empty_url(self) -> None:
        assert BackendCredentials(url="", anon_key="anon").is_valid is False

    def test_empty_key(self) -> None:
        assert BackendCredentials(url="https://x.example", anon_key="").is_valid is False


class TestLoadFromEnvVars:
    def test_env_vars_take_priority(self, tmp_path: Path) -> None:
        (tmp_path / "backend_url.txt").write_text("https://file.example")
        (tmp_path / "anon_key.txt").write_text("file_key")

        env = {
            "SIGNALFEED_BACKEND_URL": "https://env.example/",
            "SIGNALFEED_ANON_KEY": "env_key",
        }
        with mock.patch.dict(os.environ, env):
            creds = BackendCredentials.load(base_dir=tmp_path)
        assert creds.url == "https://env.example"
        assert creds.anon_key == "env_key"

    def test_partial_env_vars_fall_through(self, tmp_path: Path) -> None:
        (tmp_path / "backend_url.txt").write_text("https://file.example")
        (tmp_path / "anon_key.txt").write_text("file_key")

        with mock.patch.dict(os.environ, {"SIGNALFEED_BACKEND_URL": "https://env.example"}, clear=True):
            with _NO_KEYRING:
                creds = BackendCredentials.load(base_dir=tmp_path)
        assert creds.url == "https://file.example"
        assert creds.anon_key == "file_key"


class TestLoadFromKeyring:
    def test_keyring_before_files(self, tmp_path: Path) -> None:
        (tmp_path / "backend_url.txt").write_text("https://file.example")
        (tmp_path / "anon_key.txt").write_text("file_key")
        stored = {"backend_url": "https://ring.example", "anon_key": "ring_key"}

        with mock.patch.dict(os.environ, {}, clear=True):
            with mock.patch("keyring.get_password", side_effect=lambda svc, name: stored[name]):
                creds = BackendCredentials.load(base_dir=tmp_path)
        assert creds.url == "https://ring.example"
        assert creds.anon_key == "ring_key"

    def test_keyring_failure_is_skipped(self, tmp_path: Path) -> None:
        (tmp_path / "backend_url.txt").write_text("https://file.example")
        (tmp_path / "anon_key.txt").write_text("file_key")

        with mock.patch.dict(os.environ, {}, clear=True):
            with mock.patch("keyring.get_password", side_effect=RuntimeError("no backend")):
                creds = BackendCredentials.load(base_dir=tmp_path)
        assert creds.anon_key == "file_key"


class TestLoadFromLegacyFiles:
    def test_loads_from_files(self, tmp_path: Path) -> None:
        (tmp_path / "backend_url.txt").write_text("https://file.example/\n")
        (tmp_path / "anon_key.txt").write_text("  file_key  ")

        with mock.patch.dict(os.environ, {}, clear=True), _NO_KEYRING:
            creds = BackendCredentials.load(base_dir=tmp_path)
        assert creds.url == "https://file.example"
        assert creds.anon_key == "file_key"

    def test_missing_files(self, tmp_path: Path) -> None:
        with mock.patch.dict(os.environ, {}, clear=True), _NO_KEYRING:
            creds = BackendCredentials.load(base_dir=tmp_path)
        assert creds.is_valid is False

    def test_empty_key_file(self, tmp_path: Path) -> None:
        (tmp_path / "backend_url.txt").write_text("https://file.example")
        (tmp_path / "anon_key.txt").write_text("")

        with mock.patch.dict(os.environ, {}, clear=True), _NO_KEYRING:
            creds = BackendCredentials.load(base_dir=tmp_path)
        assert creds.is_valid is False


class TestUserSession:
    def test_from_env(self) -> None:
        env = {"SIGNALFEED_USER_ID": "u1", "SIGNALFEED_ACCESS_TOKEN": "jwt"}
        with mock.patch.dict(os.environ, env, clear=True):
            session = UserSession.from_env()
        assert session.user_id == "u1"
        assert session.is_authenticated is True

    def test_anonymous(self) -> None:
        with mock.patch.dict(os.environ, {"SIGNALFEED_USER_ID": "  "}, clear=True):
            session = UserSession.from_env()
        assert session.user_id is None
        assert session.is_authenticated is False

    def test_user_without_token(self) -> None:
        assert UserSession(user_id="u1").is_authenticated is False

"""Backend project credentials and the signed-in user session.

Credentials priority order (first match wins):

1. Environment variables ``SIGNALFEED_BACKEND_URL`` / ``SIGNALFEED_ANON_KEY``
2. OS keyring (``keyring`` library, if installed)
3. Legacy plaintext files ``backend_url.txt`` / ``anon_key.txt``

The session (who is signed in) is owned by the auth provider; here we only
read what it left in ``SIGNALFEED_USER_ID`` / ``SIGNALFEED_ACCESS_TOKEN``.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

_KEYRING_SERVICE = "signalfeed"
_LEGACY_URL_FILE = "backend_url.txt"
_LEGACY_KEY_FILE = "anon_key.txt"


@dataclass(frozen=True)
class BackendCredentials:
    """Project URL plus the public (anon) API key."""

    url: str
    anon_key: str

    @property
    def is_valid(self) -> bool:
        """True when both URL and key are non-empty."""
        return bool(self.url) and bool(self.anon_key)

    @classmethod
    def load(cls, base_dir: Path | None = None) -> BackendCredentials:
        """Attempt to load credentials from all sources in priority order.

        Check :attr:`is_valid` before using; it may contain empty strings
        if nothing was found anywhere.
        """
        url = os.environ.get("SIGNALFEED_BACKEND_URL", "").strip()
        key = os.environ.get("SIGNALFEED_ANON_KEY", "").strip()
        if url and key:
            logger.info("Loaded backend credentials from environment variables.")
            return cls(url=url.rstrip("/"), anon_key=key)

        try:
            import keyring

            url = (keyring.get_password(_KEYRING_SERVICE, "backend_url") or "").strip()
            key = (keyring.get_password(_KEYRING_SERVICE, "anon_key") or "").strip()
            if url and key:
                logger.info("Loaded backend credentials from OS keyring.")
                return cls(url=url.rstrip("/"), anon_key=key)
        except Exception as exc:
            # No usable keyring backend on this machine
            logger.debug("Keyring lookup skipped: %s", exc)

        if base_dir is None:
            base_dir = Path.cwd()
        url = _read_file(base_dir / _LEGACY_URL_FILE)
        key = _read_file(base_dir / _LEGACY_KEY_FILE)
        if url and key:
            logger.info("Loaded backend credentials from legacy text files.")
            return cls(url=url.rstrip("/"), anon_key=key)

        logger.warning("No backend credentials found in env vars, keyring, or legacy files.")
        return cls(url="", anon_key="")


@dataclass(frozen=True)
class UserSession:
    """The signed-in user, if any."""

    user_id: str | None = None
    access_token: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.user_id) and bool(self.access_token)

    @classmethod
    def from_env(cls) -> UserSession:
        user_id = os.environ.get("SIGNALFEED_USER_ID", "").strip() or None
        token = os.environ.get("SIGNALFEED_ACCESS_TOKEN", "").strip() or None
        return cls(user_id=user_id, access_token=token)


def _read_file(path: Path) -> str:
    """Read and strip a single-line credential file. Return '' on failure."""
    try:
        return path.read_text(encoding="utf-8").strip()
    except OSError:
        return ""

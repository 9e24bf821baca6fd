"""
Secret storage for GitLab credentials.

The widget needs two secrets: the GitLab instance URL and a personal access
token. They are kept in a small SQLite database in the user's home directory,
readable only by its owner.
"""

import os
import sqlite3
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

GITLAB_URL_KEY = "gitlab_url"
GITLAB_ACCESS_TOKEN_KEY = "gitlab_access_token"

MISSING_CREDENTIALS_MESSAGE = (
    "Credentials are not provided. Run `gitlab-graph credentials` to enter them."
)


class MissingCredentialsError(Exception):
    """Raised when the GitLab URL or access token has not been stored."""

    def __init__(self, message: str = MISSING_CREDENTIALS_MESSAGE):
        super().__init__(message)


@dataclass
class Credentials:
    """GitLab instance URL and personal access token."""

    url: str
    token: str


class SecretStore(Protocol):
    """Key/value store for secret strings."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...

    def contains(self, key: str) -> bool: ...


def _get_default_db_path() -> Path:
    """Get the default database path."""
    env_path = os.environ.get("GITLAB_GRAPH_DB_PATH")
    if env_path:
        return Path(env_path)
    return Path.home() / ".gitlab-graph" / "secrets.db"


class SQLiteSecretStore:
    """SQLite-based secret store."""

    def __init__(self, db_path: str | Path | None = None):
        """
        Initialize the secret store.

        Args:
            db_path: Path to the SQLite database file.
                     Defaults to ~/.gitlab-graph/secrets.db
        """
        if db_path is None:
            db_path = _get_default_db_path()
        self.db_path = Path(db_path)
        self._init_db()

    def _init_db(self) -> None:
        """Create the secrets table if it doesn't exist."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.db_path.touch(mode=0o600, exist_ok=True)
        os.chmod(self.db_path, 0o600)

        with sqlite3.connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS secrets (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT DEFAULT CURRENT_TIMESTAMP
                )
            """)
            conn.commit()

    def get(self, key: str) -> str | None:
        with sqlite3.connect(self.db_path) as conn:
            row = conn.execute(
                "SELECT value FROM secrets WHERE key = ?",
                (key,),
            ).fetchone()
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        """Store a secret (upserts)."""
        with sqlite3.connect(self.db_path) as conn:
            conn.execute(
                """
                INSERT INTO secrets (key, value, updated_at)
                VALUES (?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                (key, value),
            )
            conn.commit()

    def remove(self, key: str) -> None:
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("DELETE FROM secrets WHERE key = ?", (key,))
            conn.commit()

    def contains(self, key: str) -> bool:
        return self.get(key) is not None


class MemorySecretStore:
    """In-process secret store, used by tests and previews."""

    def __init__(self, secrets: dict[str, str] | None = None):
        self._secrets = dict(secrets or {})

    def get(self, key: str) -> str | None:
        return self._secrets.get(key)

    def set(self, key: str, value: str) -> None:
        self._secrets[key] = value

    def remove(self, key: str) -> None:
        self._secrets.pop(key, None)

    def contains(self, key: str) -> bool:
        return key in self._secrets


def has_credentials(store: SecretStore) -> bool:
    """Whether both the URL and the access token are stored."""
    return store.contains(GITLAB_URL_KEY) and store.contains(GITLAB_ACCESS_TOKEN_KEY)


def load_credentials(store: SecretStore) -> Credentials:
    """
    Read the GitLab credentials from a secret store.

    Raises:
        MissingCredentialsError: If the URL or the token is absent or empty
    """
    url = store.get(GITLAB_URL_KEY)
    token = store.get(GITLAB_ACCESS_TOKEN_KEY)
    if not url or not token:
        raise MissingCredentialsError()
    return Credentials(url=url, token=token)


def save_credentials(store: SecretStore, url: str | None, token: str | None) -> bool:
    """
    Store whichever of the URL and token are non-empty.

    Returns:
        True if both credentials are stored afterwards
    """
    url = (url or "").strip().rstrip("/")
    token = (token or "").strip()

    if url:
        store.set(GITLAB_URL_KEY, url)
    if token:
        store.set(GITLAB_ACCESS_TOKEN_KEY, token)

    return has_credentials(store)


def remove_credentials(store: SecretStore) -> None:
    """Remove both credentials from the store."""
    for key in (GITLAB_URL_KEY, GITLAB_ACCESS_TOKEN_KEY):
        if store.contains(key):
            store.remove(key)


def seed_from_environment(
    store: SecretStore, url: str | None, token: str | None
) -> bool:
    """
    Fill an empty store with credentials from the environment.

    Stored credentials are never overwritten.

    Returns:
        True if anything was written
    """
    if store.contains(GITLAB_URL_KEY) or store.contains(GITLAB_ACCESS_TOKEN_KEY):
        return False
    if not url or not token:
        return False
    save_credentials(store, url, token)
    return True

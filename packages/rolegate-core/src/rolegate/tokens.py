"""Persistence of the bearer tokens that let a client restore its session."""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Protocol

import structlog

log = structlog.get_logger(__name__)

_ROLEGATE_DIR_NAME = ".rolegate"
_TOKEN_FILE_NAME = "session.json"


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


class TokenStore(Protocol):
    def load(self) -> TokenPair | None: ...
    def save(self, tokens: TokenPair) -> None: ...
    def clear(self) -> None: ...


class MemoryTokenStore:
    """Tokens live as long as the process."""

    def __init__(self) -> None:
        self._tokens: TokenPair | None = None

    def load(self) -> TokenPair | None:
        return self._tokens

    def save(self, tokens: TokenPair) -> None:
        self._tokens = tokens

    def clear(self) -> None:
        self._tokens = None


def get_rolegate_dir(home: Path | None = None) -> Path:
    """Return the per-user .rolegate directory, creating it if missing."""
    rolegate_dir = (home or Path.home()) / _ROLEGATE_DIR_NAME
    rolegate_dir.mkdir(mode=0o700, exist_ok=True)
    log.debug("rolegate_dir_resolved", path=str(rolegate_dir))
    return rolegate_dir


def get_token_path(home: Path | None = None) -> Path:
    return get_rolegate_dir(home) / _TOKEN_FILE_NAME


class FileTokenStore:
    """Tokens survive restarts in a JSON file readable only by the owner."""

    def __init__(self, path: Path | str | None = None) -> None:
        self._path = Path(path) if path is not None else get_token_path()

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> TokenPair | None:
        if not self._path.exists():
            return None
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
            return TokenPair(access_token=data["access_token"], refresh_token=data["refresh_token"])
        except (ValueError, KeyError, TypeError):
            log.warning("token_file_unreadable", path=str(self._path))
            return None

    def save(self, tokens: TokenPair) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(self._path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump(asdict(tokens), fh)
        log.debug("tokens_saved", path=str(self._path))

    def clear(self) -> None:
        self._path.unlink(missing_ok=True)
        log.debug("tokens_cleared", path=str(self._path))

"""
token_store.py

Responsibility: Persist the encrypted token at a single file path.

The key is never stored; `key_provider` recomputes it on every load/save
(normally `derive_key(resolve())`). Read and authentication failures collapse
to "no stored token" so the caller can simply prompt again.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Callable

from mr.crypto import AuthenticationFailure, decrypt_token, derive_key, encrypt_token
from mr.machine_id import resolve

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_PATH = Path("~/.mr_token")

DIR_MODE = 0o700
FILE_MODE = 0o600


def machine_key() -> bytes:
    return derive_key(resolve())


class TokenStore:
    def __init__(self, path: str | Path = DEFAULT_TOKEN_PATH, key_provider: Callable[[], bytes] | None = None) -> None:
        self._path = Path(path).expanduser()
        self._key_provider = key_provider or machine_key

    @property
    def path(self) -> Path:
        return self._path

    def _read_record(self) -> str | None:
        try:
            return self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not read token file %s: %s", self._path, e)
            return None

    def load(self) -> str | None:
        """
        Return the stored token, or None if it is missing or unusable.

        Only read errors and AuthenticationFailure are mapped to None; a
        machine identity failure still propagates.
        """
        record = self._read_record()
        if record is None:
            return None

        key = self._key_provider()
        try:
            return decrypt_token(record, key)
        except AuthenticationFailure as e:
            logger.warning("Ignoring stored token at %s: %s", self._path, e)
            return None

    def save(self, token: str) -> None:
        parent = self._path.parent
        if not parent.exists():
            parent.mkdir(parents=True, mode=DIR_MODE)
            # mkdir's mode is filtered by the umask.
            parent.chmod(DIR_MODE)

        record = encrypt_token(token, self._key_provider())

        fd, tmp_name = tempfile.mkstemp(dir=str(parent), prefix=f".{self._path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(record)
                f.flush()
                os.fsync(f.fileno())
            os.chmod(tmp_name, FILE_MODE)
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("Token saved to %s", self._path)

    def clear(self) -> None:
        self._path.unlink(missing_ok=True)
        logger.debug("Token file %s removed", self._path)

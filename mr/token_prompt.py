"""
token_prompt.py

Responsibility: Obtain a well-formed GitHub personal access token.

`TokenPrompt.acquire()` returns the stored token when there is a usable one;
otherwise it prompts on the console up to `max_attempts` times, saves the
first valid answer and returns it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from mr.token_store import TokenStore

logger = logging.getLogger(__name__)

TOKEN_PREFIX = "ghp_"
DEFAULT_MAX_ATTEMPTS = 3

PAT_INSTRUCTIONS = """\
🔑 GitHub Personal Access Token (PAT) required.

To generate a new PAT:
1. Visit: https://github.com/settings/tokens
2. Click "Generate new token" (classic)
3. Give it a name (e.g., "mr-tool")
4. Select scopes: 'repo' and 'workflow'
5. Click "Generate token"
6. Copy the generated token and paste it below"""


class FormatValidationError(ValueError):
    pass


class MaxAttemptsExceeded(RuntimeError):
    pass


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of `validate_token`; `error` names the violated rule."""

    valid: bool
    error: str | None = None


def validate_token(token: str) -> ValidationResult:
    if not token.startswith(TOKEN_PREFIX):
        return ValidationResult(False, f"Token must start with '{TOKEN_PREFIX}'")

    # An empty suffix passes: the rule only constrains characters that exist.
    if not all(ch.isalnum() for ch in token[len(TOKEN_PREFIX) :]):
        return ValidationResult(False, f"Token should only contain letters and numbers after '{TOKEN_PREFIX}'")

    return ValidationResult(True)


def require_valid_token(token: str) -> str:
    result = validate_token(token)
    if not result.valid:
        raise FormatValidationError(result.error or "unknown error")
    return token


def _read_line(input_func: Callable[[str], str], prompt: str) -> str:
    try:
        return input_func(prompt)
    except EOFError:
        return ""


class TokenPrompt:
    def __init__(
        self,
        store: TokenStore,
        *,
        input_func: Callable[[str], str] = input,
        output_func: Callable[[str], None] = print,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._store = store
        self._input = input_func
        self._output = output_func
        self._max_attempts = max_attempts

    def stored_token(self) -> str | None:
        """
        Return the stored token if it still passes format validation.

        A stored token that no longer validates is removed so the next
        prompt replaces it.
        """
        token = self._store.load()
        if token is None:
            return None
        if not validate_token(token).valid:
            logger.warning("Stored token has an invalid format; discarding it")
            self._store.clear()
            return None
        return token

    def prompt(self) -> str:
        attempts = 0
        while attempts < self._max_attempts:
            self._output(PAT_INSTRUCTIONS)
            token = _read_line(self._input, "\nPAT: ").strip()

            if not token:
                attempts += 1
                self._output("\n❌ Token cannot be empty")
                continue

            try:
                require_valid_token(token)
            except FormatValidationError as e:
                attempts += 1
                self._output(f"\n❌ Invalid token format: {e}")
                if attempts < self._max_attempts:
                    self._output(f"Please try again ({self._max_attempts - attempts} attempts remaining)\n")
                continue

            self._store.save(token)
            return token

        raise MaxAttemptsExceeded("Maximum token entry attempts exceeded")

    def acquire(self) -> str:
        token = self.stored_token()
        if token is not None:
            logger.debug("Using stored token from %s", self._store.path)
            return token
        return self.prompt()

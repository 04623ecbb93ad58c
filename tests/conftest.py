from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from mr.crypto import derive_key
from mr.token_store import TokenStore


def key_for(machine_id: str) -> Callable[[], bytes]:
    return lambda: derive_key(machine_id)


@pytest.fixture
def token_path(tmp_path: Path) -> Path:
    return tmp_path / "home" / ".mr_token"


@pytest.fixture
def store(token_path: Path) -> TokenStore:
    return TokenStore(token_path, key_provider=key_for("host-a-machine-id"))


class ScriptedInput:
    """Stands in for `input()`: returns queued answers, EOF when exhausted."""

    def __init__(self, answers: list[str]) -> None:
        self._answers = list(answers)
        self.prompts: list[str] = []

    def __call__(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self._answers:
            raise EOFError
        return self._answers.pop(0)


@pytest.fixture
def scripted_input() -> Callable[[list[str]], ScriptedInput]:
    return ScriptedInput

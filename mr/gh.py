"""
gh.py

Responsibility: Isolate every invocation of the `gh` and `git` binaries.

The token, when there is one, reaches `gh` only through the GH_TOKEN
environment variable of the spawned process. Commands are never logged
together with their environment.
"""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)

GITHUB_HOSTNAME = "github.com"


class ExternalCommandFailure(RuntimeError):
    def __init__(self, cmd: list[str], returncode: int, output: str = "") -> None:
        self.cmd = list(cmd)
        self.returncode = returncode
        self.output = output
        message = f"Command failed ({returncode}): {' '.join(cmd)}"
        if output.strip():
            message += f"\n\n{output.strip()}"
        super().__init__(message)


def run_command(
    cmd: list[str],
    *,
    cwd: Path | None = None,
    env: dict[str, str] | None = None,
    capture: bool = True,
) -> subprocess.CompletedProcess[str]:
    """
    Run a command and raise ExternalCommandFailure on a non-zero exit.

    With `capture`, stdout and stderr are merged and returned; otherwise the
    child inherits the terminal (needed for `gh repo create` progress output).
    A missing binary is reported the same way, with exit status 127.
    """
    logger.debug("Running: %s", " ".join(cmd))
    try:
        result = subprocess.run(
            cmd,
            cwd=str(cwd) if cwd else None,
            env=env,
            check=False,
            stdout=subprocess.PIPE if capture else None,
            stderr=subprocess.STDOUT if capture else None,
            text=True,
        )
    except FileNotFoundError as e:
        raise ExternalCommandFailure(cmd, 127, str(e)) from e

    if result.returncode != 0:
        raise ExternalCommandFailure(cmd, result.returncode, result.stdout or "")
    return result


class GhCli:
    def __init__(self, gh_path: str = "gh", token: str | None = None) -> None:
        self._gh = gh_path
        self._token = token

    @property
    def token(self) -> str | None:
        return self._token

    def with_token(self, token: str) -> "GhCli":
        return GhCli(self._gh, token)

    def _env(self) -> dict[str, str]:
        env = os.environ.copy()
        if self._token:
            env["GH_TOKEN"] = self._token
        return env

    def _run(self, args: list[str], *, cwd: Path | None = None, capture: bool = True) -> subprocess.CompletedProcess[str]:
        return run_command([self._gh, *args], cwd=cwd, env=self._env(), capture=capture)

    def is_authenticated(self) -> bool:
        try:
            self._run(["auth", "status"])
        except ExternalCommandFailure:
            return False
        return True

    def logout(self, hostname: str = GITHUB_HOSTNAME) -> None:
        """
        Log out of `hostname`; failures are expected when nobody is logged in.
        """
        try:
            self._run(["auth", "logout", "--hostname", hostname])
        except ExternalCommandFailure as e:
            logger.debug("gh auth logout failed (ignored): %s", e.returncode)

    def create_repo(self, name: str, *, private: bool = True, description: str = "", cwd: Path | None = None) -> None:
        args = ["repo", "create", name, "--private" if private else "--public", "--clone"]
        if description:
            args += ["--description", description]
        self._run(args, cwd=cwd, capture=False)

    def viewer_login(self) -> str:
        result = self._run(["api", "user", "--jq", ".login"])
        login = (result.stdout or "").strip()
        if not login:
            raise ExternalCommandFailure([self._gh, "api", "user"], 0, "Could not get GitHub username")
        return login


class Git:
    def __init__(self, git_path: str = "git") -> None:
        self._git = git_path

    def run(self, args: list[str], *, cwd: Path) -> str:
        result = run_command([self._git, *args], cwd=cwd)
        return result.stdout or ""

    def commit(self, workdir: Path, *, branch: str = "main", message: str = "Initial commit") -> None:
        # A fresh clone of an empty repo starts on git's init.defaultBranch.
        self.run(["checkout", "-B", branch], cwd=workdir)
        self.run(["add", "."], cwd=workdir)
        output = self.run(["commit", "-m", message], cwd=workdir)
        if output.strip():
            print(output.strip())

    def push(self, workdir: Path, *, branch: str = "main") -> None:
        output = self.run(["push", "-u", "origin", branch], cwd=workdir)
        if output.strip():
            print(output.strip())

"""
cli.py

Responsibility: CLI entrypoint for mr.

High-level flow (`mr <repo-name>`):
1) Load config (YAML) and apply CLI overrides
2) If `gh` is not already logged in, obtain a token (stored or prompted)
3) Create the private repository with `gh repo create --clone`
4) Render the README template into the clone
5) Commit and push to `main`

This module orchestrates behavior but keeps concerns isolated:
- Token handling: `token_store.py`, `token_prompt.py`
- External binaries: `gh.py`
- GitHub REST lookups: `github_client.py`
- Rendering: `renderer.py`
"""

from __future__ import annotations

import argparse
import dataclasses
import getpass
import logging
import sys
from pathlib import Path

from mr import __version__
from mr.config import Config, ConfigError, load_config
from mr.gh import ExternalCommandFailure, GhCli, Git
from mr.github_client import GitHubClient, GitHubError
from mr.machine_id import FatalConfigurationError
from mr.renderer import RenderError, render_template_dir, resolve_template_dir
from mr.token_prompt import MaxAttemptsExceeded, TokenPrompt
from mr.token_store import TokenStore

logger = logging.getLogger(__name__)


class CLIError(RuntimeError):
    pass


HANDLED_ERRORS = (
    CLIError,
    ConfigError,
    ExternalCommandFailure,
    FatalConfigurationError,
    GitHubError,
    MaxAttemptsExceeded,
    RenderError,
    OSError,
)


def _apply_overrides(config: Config, args: argparse.Namespace) -> Config:
    changes: dict[str, object] = {}
    if args.token_file:
        changes["token_file"] = Path(args.token_file).expanduser()
    if args.branch:
        changes["branch"] = args.branch
    if args.template:
        changes["template"] = args.template
    if args.private is not None:
        changes["private"] = bool(args.private)
    return dataclasses.replace(config, **changes) if changes else config


def _split_repo_name(repo_name: str) -> tuple[str | None, str]:
    """
    `gh` accepts NAME or OWNER/NAME and clones into NAME either way.
    """
    owner, _, name = repo_name.rpartition("/")
    if not name:
        raise CLIError(f"Invalid repository name: {repo_name!r}")
    return (owner or None), name


def _token_prompt(store: TokenStore, config: Config) -> TokenPrompt:
    input_func = getpass.getpass if config.prompt.mask_input else input
    return TokenPrompt(store, input_func=input_func, max_attempts=config.prompt.max_attempts)


def _ensure_repo_absent(token: str, owner: str | None, name: str) -> None:
    """
    Best-effort early check; `gh repo create` remains the source of truth.
    """
    client = GitHubClient(token)
    try:
        owner = owner or client.viewer_login()
        existing = client.get_repo(owner, name)
    except GitHubError as e:
        logger.debug("Skipping repository existence check: %s", e)
        return
    if existing is not None:
        raise CLIError(f"Repository already exists: {existing.html_url}")


def _viewer_login(gh: GhCli) -> str | None:
    """
    Login of the account that owns the new repo, or None if it cannot be
    determined. The repository already exists at this point, so a failed
    lookup must not fail the run.
    """
    if gh.token:
        try:
            return GitHubClient(gh.token).viewer_login()
        except GitHubError as e:
            logger.debug("REST login lookup failed, asking gh: %s", e)
    try:
        return gh.viewer_login()
    except ExternalCommandFailure as e:
        logger.debug("gh login lookup failed: %s", e)
        return None


def create_cmd(args: argparse.Namespace) -> int:
    config = _apply_overrides(load_config(args.config), args)
    store = TokenStore(config.token_file)

    if args.forget_token:
        store.clear()
        print(f"🗑  Removed stored token {store.path}")
        return 0

    if not args.repo_name:
        print("Usage: mr <repo-name>")
        return 1

    owner, name = _split_repo_name(args.repo_name)
    workdir = Path.cwd() / name
    if workdir.exists():
        raise CLIError(f"Local directory already exists: {workdir}")

    gh = GhCli(config.gh_path)
    if not gh.is_authenticated():
        gh.logout()
        token = _token_prompt(store, config).acquire()
        gh = gh.with_token(token)
        _ensure_repo_absent(token, owner, name)

    print(f"📦 Creating repository '{args.repo_name}' on GitHub...")
    try:
        gh.create_repo(args.repo_name, private=config.private, description=args.description or "", cwd=Path.cwd())
    except ExternalCommandFailure:
        if gh.token:
            print("\n❌ Authentication failed: Invalid GitHub token")
            store.clear()
        raise

    template_dir = resolve_template_dir(config.template)
    render_template_dir(
        template_dir=template_dir,
        destination_dir=workdir,
        context={"repo_name": name, "description": args.description or ""},
    )

    git = Git(config.git_path)
    print("📝 Creating initial commit...")
    git.commit(workdir, branch=config.branch)

    print("🚀 Pushing to GitHub...")
    git.push(workdir, branch=config.branch)

    login = owner or _viewer_login(gh)
    print(f"✅ Successfully created repository '{args.repo_name}'!")
    print(f"   Local path: {workdir}")
    if login:
        print(f"   GitHub URL: https://github.com/{login}/{name}")
    return 0


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="mr", description="Create a private GitHub repository and push an initial commit")
    p.add_argument("repo_name", nargs="?", help="Repository name (NAME or OWNER/NAME)")
    p.add_argument("--description", default=None, help="Repository description (also used in the README)")
    p.add_argument("--private", dest="private", action="store_true", default=None, help="Create a private repo (default)")
    p.add_argument("--public", dest="private", action="store_false", default=None, help="Create a public repo")
    p.add_argument("--branch", default=None, help="Branch to push (default: main)")
    p.add_argument("--template", default=None, help="Built-in template name or template directory")
    p.add_argument("--config", default=None, help="Path to YAML config (or set env MR_CONFIG)")
    p.add_argument("--token-file", default=None, help="Encrypted token file (default: ~/.mr_token)")
    p.add_argument("--forget-token", action="store_true", help="Delete the stored token and exit")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.set_defaults(func=create_cmd)
    return p


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        return int(args.func(args))
    except HANDLED_ERRORS as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())

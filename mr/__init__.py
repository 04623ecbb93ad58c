"""
mr package

This package implements `mr`, a CLI that creates a private GitHub repository,
clones it and pushes an initial commit.

Key responsibilities are split across modules:
- `machine_id.py`: resolve a persistent per-host identifier
- `crypto.py`: derive a key from that identifier and seal/open the stored token
- `token_store.py`: the encrypted token file on disk
- `token_prompt.py`: token format validation and the interactive prompt loop
- `config.py`: optional YAML configuration
- `gh.py`: `gh` CLI interactions (auth status, repo create, viewer login)
- `github_client.py`: isolated GitHub REST API lookups
- `renderer.py`: README rendering into the fresh clone
- `cli.py`: CLI entrypoint and orchestration (token -> gh -> git -> push)
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"

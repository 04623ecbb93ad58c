"""
renderer.py

Responsibility: Render the initial repository content into a fresh clone.

Rules:
- Templates live in `mr/templates/<name>/` or in a directory given by path.
- Files are walked in sorted order so output is deterministic.
- UTF-8 text files are rendered with Jinja2; other files are copied byte-for-byte.
- Existing files in the destination are never overwritten, and `.git` is left alone.

This module intentionally does NOT know about GitHub, git, or CLI parsing.
"""

from __future__ import annotations

import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from jinja2 import Environment, StrictUndefined, TemplateError

BUILTIN_TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"


class RenderError(RuntimeError):
    pass


@dataclass(frozen=True)
class RenderResult:
    rendered_files: int
    copied_files: int
    skipped_files: int


def resolve_template_dir(template: str | Path) -> Path:
    """
    A bare name selects a built-in template; anything that exists as a
    directory is used as is.
    """
    candidate = Path(template).expanduser()
    if candidate.is_dir():
        return candidate.resolve()
    builtin = BUILTIN_TEMPLATES_DIR / str(template)
    if builtin.is_dir():
        return builtin
    raise RenderError(f"Template not found: {template}")


def _is_binary_file(path: Path) -> bool:
    try:
        path.read_text(encoding="utf-8")
        return False
    except UnicodeDecodeError:
        return True


def _iter_template_files(template_dir: Path) -> list[Path]:
    files: list[Path] = []
    for root, _dirs, filenames in os.walk(template_dir):
        root_path = Path(root)
        for name in filenames:
            files.append(root_path / name)
    files.sort(key=lambda p: str(p.relative_to(template_dir)).replace(os.sep, "/"))
    return files


def render_template_dir(
    *,
    template_dir: str | Path,
    destination_dir: str | Path,
    context: dict[str, Any],
) -> RenderResult:
    tpl_dir = Path(template_dir).resolve()
    dst_dir = Path(destination_dir).resolve()

    if not tpl_dir.is_dir():
        raise RenderError(f"Template directory not found: {tpl_dir}")

    env = Environment(
        autoescape=False,
        undefined=StrictUndefined,
        keep_trailing_newline=True,
    )

    rendered = 0
    copied = 0
    skipped = 0

    for src_path in _iter_template_files(tpl_dir):
        rel = src_path.relative_to(tpl_dir)
        if rel.parts[0] == ".git":
            continue
        dst_path = dst_dir / rel
        if dst_path.exists():
            skipped += 1
            continue
        dst_path.parent.mkdir(parents=True, exist_ok=True)

        if _is_binary_file(src_path):
            shutil.copy2(src_path, dst_path)
            copied += 1
            continue

        try:
            out = env.from_string(src_path.read_text(encoding="utf-8")).render(**context)
        except TemplateError as e:
            raise RenderError(f"Failed rendering template file: {rel}") from e
        dst_path.write_text(out, encoding="utf-8", newline="\n")
        rendered += 1

    return RenderResult(rendered_files=rendered, copied_files=copied, skipped_files=skipped)

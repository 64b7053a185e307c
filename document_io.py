"""Document loading and saving helpers."""

from __future__ import annotations

from pathlib import Path


def load(path: Path) -> str:
    if not path.exists():
        return ""
    return path.read_text(encoding="utf-8")


def save(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def coerce_markdown_path(path: Path) -> Path:
    if path.suffix in (".md", ".markdown"):
        return path
    return path.with_suffix(".md")

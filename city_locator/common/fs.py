"""Filesystem helpers."""

from __future__ import annotations

from pathlib import Path


def ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def read_yaml(path: Path):
    import yaml

    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def read_lines(path: Path, encoding: str = "utf-8") -> list[str]:
    # utf-8-sig drops a leading BOM that would otherwise glue onto the first header field
    if encoding.lower().replace("_", "-") == "utf-8":
        encoding = "utf-8-sig"
    with path.open("r", encoding=encoding, newline="") as f:
        return f.read().splitlines()

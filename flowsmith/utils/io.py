# utils/io.py
from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Union

import yaml

# -------- Path helpers --------
PathLike = Union[str, Path]

_WS = re.compile(r"\s+")


def to_path(p: PathLike) -> Path:
    """Convert string-like to pathlib.Path."""
    return p if isinstance(p, Path) else Path(p)


def ensure_parent(path: PathLike) -> Path:
    """Ensure parent directory exists for a file path."""
    p = to_path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    return p


def slugify_filename(name: str, suffix: str = ".json") -> str:
    """
    Download-style file name for a workflow: whitespace runs -> '_', lowercased.
    Path separators are replaced too, since the name is otherwise unconstrained.
    """
    stem = _WS.sub("_", name).lower()
    stem = stem.replace("/", "_").replace("\\", "_")
    return f"{stem or 'workflow'}{suffix}"


# -------- Text / JSON / YAML --------
def write_text(path: PathLike, text: str, encoding: str = "utf-8") -> Path:
    """Write text atomically (via temp file then replace)."""
    p = ensure_parent(path)
    tmp = p.with_suffix(p.suffix + ".tmp")
    tmp.write_text(text, encoding=encoding)
    tmp.replace(p)
    return p


def dump_json(data: Any, indent: int = 2) -> str:
    return json.dumps(data, ensure_ascii=False, indent=indent)


def dump_yaml(data: Any) -> str:
    return yaml.safe_dump(data, sort_keys=False, allow_unicode=True)


def write_json(path: PathLike, data: Any, indent: int = 2) -> Path:
    """Write JSON atomically, pretty-formatted."""
    return write_text(path, dump_json(data, indent=indent) + "\n")


def write_yaml(path: PathLike, data: Any) -> Path:
    return write_text(path, dump_yaml(data))


# -------- Matplotlib integration --------
def save_fig(fig, path: PathLike, **kwargs) -> Path:
    """
    Save matplotlib figure with sensible defaults.
    Example kwargs: bbox_inches="tight", pad_inches=0.03, dpi=200
    """
    p = ensure_parent(path)
    fig.savefig(p, **({"bbox_inches": "tight", "pad_inches": 0.03, "dpi": 200} | kwargs))
    return p

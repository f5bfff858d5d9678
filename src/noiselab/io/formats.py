from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

import numpy as np


def read_json(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def write_json(path: Path, payload: Dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)


def field_paths(out: Path) -> tuple[Path, Path]:
    """Return the (.npy, .json) pair for an output stem."""
    base = out.with_suffix("") if out.suffix in (".npy", ".json") else out
    return base.with_name(base.name + ".npy"), base.with_name(base.name + ".json")


def save_field(out: Path, field: np.ndarray, meta: Dict[str, Any]) -> tuple[Path, Path]:
    npy_path, meta_path = field_paths(out)
    npy_path.parent.mkdir(parents=True, exist_ok=True)
    np.save(npy_path, field, allow_pickle=False)
    write_json(meta_path, meta)
    return npy_path, meta_path


def load_field(out: Path) -> tuple[np.ndarray, Dict[str, Any]]:
    npy_path, meta_path = field_paths(out)
    return np.load(npy_path, allow_pickle=False), read_json(meta_path)

"""File I/O utilities — atomic text writes, YAML config and JSON sidecars."""

from __future__ import annotations

import io
import json
import tempfile
from pathlib import Path
from typing import Any

from pydantic import BaseModel
from ruamel.yaml import YAML

_yaml = YAML()
_yaml.preserve_quotes = True
_yaml.default_flow_style = False


def write_atomic(path: Path | str, text: str) -> None:
    """Write text next to ``path`` and swap it into place.

    Readers see either the old file or the new one, never a partial write.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with tempfile.NamedTemporaryFile(
        mode="w",
        dir=path.parent,
        prefix=f".{path.stem}.",
        suffix=".tmp",
        delete=False,
    ) as tmp:
        tmp.write(text)
        tmp_path = Path(tmp.name)

    try:
        tmp_path.replace(path)
    except OSError:
        tmp_path.unlink(missing_ok=True)
        raise


def read_yaml(path: Path | str) -> dict:
    """Read a YAML file and return as dict."""
    with open(path) as f:
        return dict(_yaml.load(f) or {})


def write_yaml(path: Path | str, data: dict) -> None:
    buffer = io.StringIO()
    _yaml.dump(data, buffer)
    write_atomic(path, buffer.getvalue())


def read_json(path: Path | str) -> Any:
    with open(path) as f:
        return json.load(f)


def write_json(path: Path | str, data: BaseModel | Any) -> None:
    """Write a model (or plain data) as indented JSON."""
    if isinstance(data, BaseModel):
        data = data.model_dump(mode="json")
    write_atomic(path, json.dumps(data, indent=2) + "\n")

"""
Views and model files for the Elementary CLI.

Views file: a JSON object mapping view names to registry entries.

  {
    "main": {"view": {"tag": "h1", "children": [{"text": "{{title}}"}]}},
    "row":  {"view": {"tag": "li", "children": [{"text": "{{item}}"}]}}
  }

Model file: any JSON object. It becomes the top-level render context.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, RootModel, ValidationError


class ViewsFileError(Exception):
    """A views or model file could not be read or has the wrong shape."""


class ViewEntry(BaseModel):
    """One registry entry. Extra keys are kept so callers can annotate views."""

    model_config = ConfigDict(extra="allow")

    view: Any


class ViewsFile(RootModel[dict[str, ViewEntry]]):
    """The whole views file: view name -> entry."""


def _read_json(path: Path) -> Any:
    try:
        with open(path) as f:
            return json.load(f)
    except FileNotFoundError:
        raise ViewsFileError(f"{path}: no such file")
    except json.JSONDecodeError as e:
        raise ViewsFileError(f"{path}: invalid JSON ({e.msg} at line {e.lineno})")


def load_views(path: str | Path) -> dict[str, dict[str, Any]]:
    """Read and validate a views file. Returns {name: {"view": spec, ...}}."""
    path = Path(path)
    try:
        views = ViewsFile.model_validate(_read_json(path))
    except ValidationError as e:
        raise ViewsFileError(f"{path}: not a views file\n{e}")
    return {name: entry.model_dump() for name, entry in views.root.items()}


def load_model(path: str | Path | None) -> dict[str, Any]:
    """Read a model file. No path means an empty model."""
    if path is None:
        return {}
    path = Path(path)
    data = _read_json(path)
    if not isinstance(data, dict):
        raise ViewsFileError(f"{path}: model must be a JSON object")
    return data

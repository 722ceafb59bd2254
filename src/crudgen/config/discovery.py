"""Locate and read the TOML file that configures crudgen.

crudgen's settings live either in a dedicated ``crudgen.toml`` or in the
``[tool.crudgen]`` table of the embedding project's ``pyproject.toml``. The
nearest directory holding one of them, walking up from the start directory,
wins; within one directory ``crudgen.toml`` is preferred.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

from crudgen.config.models import CrudgenConfig
from crudgen.errors import ConfigurationError

CONFIG_FILENAME = "crudgen.toml"
PYPROJECT_FILENAME = "pyproject.toml"
CONFIG_ENV_VAR = "CRUDGEN_CONFIG"


def _parse(path: Path) -> dict[str, Any]:
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        msg = f"Invalid TOML in {path}: {exc}"
        raise ConfigurationError(msg, offending=path) from exc


def _crudgen_table(document: dict[str, Any]) -> dict[str, Any] | None:
    table = document.get("tool", {}).get("crudgen")
    return table if isinstance(table, dict) else None


def find_config(start: Path | None = None) -> Path | None:
    """The config file that applies to *start* (default: cwd), or None.

    ``CRUDGEN_CONFIG`` overrides discovery and must name an existing file.
    A ``pyproject.toml`` only counts when it has a ``[tool.crudgen]`` table.

    Raises:
        ConfigurationError: If ``CRUDGEN_CONFIG`` names something that is
            not a file.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        path = Path(env_path)
        if not path.is_file():
            msg = f"{CONFIG_ENV_VAR} points at {path}, which is not a file."
            raise ConfigurationError(msg, offending=path)
        return path

    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        pyproject = directory / PYPROJECT_FILENAME
        if pyproject.is_file() and _crudgen_table(_parse(pyproject)) is not None:
            return pyproject
    return None


def read_toml(path: Path) -> dict[str, Any]:
    """The crudgen settings held in *path*.

    For a ``pyproject.toml`` that is its ``[tool.crudgen]`` table, empty when
    the table is absent; any other file is read whole.
    """
    document = _parse(path)
    if path.name == PYPROJECT_FILENAME:
        return _crudgen_table(document) or {}
    return document


def load_config(path: Path | None = None, cwd: Path | None = None) -> CrudgenConfig:
    """Validate the config at *path*, discovered from *cwd* when omitted.

    Defaults apply when no file is found.
    """
    if path is None:
        path = find_config(cwd)
    if path is None:
        return CrudgenConfig()
    return CrudgenConfig.model_validate(read_toml(path))

"""Config file discovery and loading.

Walk-up finder locates ``prefixcop.toml``, or a ``pyproject.toml`` that
carries a ``[tool.prefixcop]`` table, similar to how git finds .git/.
Supports PREFIXCOP_CONFIG env var and --config CLI flag overrides.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

from prefixcop.config.models import PrefixConfig

CONFIG_FILENAME = "prefixcop.toml"
PYPROJECT_FILENAME = "pyproject.toml"
CONFIG_ENV_VAR = "PREFIXCOP_CONFIG"


def _has_tool_table(path: Path) -> bool:
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError):
        return False
    return isinstance(data.get("tool", {}).get("prefixcop"), dict)


def find_config(start: Path | None = None) -> Path | None:
    """Walk up from *start* (default: cwd) looking for a config file.

    In each directory ``prefixcop.toml`` wins over ``pyproject.toml``;
    the latter only counts when it has a ``[tool.prefixcop]`` table.
    Returns the path to the config file, or None if not found.
    Checks PREFIXCOP_CONFIG env var first.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        p = Path(env_path)
        if p.is_file():
            return p
        return None

    current = (start or Path.cwd()).resolve()
    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        pyproject = current / PYPROJECT_FILENAME
        if pyproject.is_file() and _has_tool_table(pyproject):
            return pyproject
        parent = current.parent
        if parent == current:
            break
        current = parent
    return None


def read_config_data(path: Path) -> dict[str, Any]:
    """Parse a config file into the raw settings dict.

    For ``pyproject.toml`` only the ``[tool.prefixcop]`` table is returned.
    Raises ``tomllib.TOMLDecodeError`` on invalid TOML.
    """
    data: dict[str, Any] = tomllib.loads(path.read_text(encoding="utf-8"))
    if path.name == PYPROJECT_FILENAME:
        table = data.get("tool", {}).get("prefixcop", {})
        return table if isinstance(table, dict) else {}
    return data


def load_config(path: Path | None = None, cwd: Path | None = None) -> PrefixConfig:
    """Load and validate config from a TOML file.

    If *path* is None, uses find_config(*cwd*) to discover the file.
    Returns default PrefixConfig if no file is found.
    """
    if path is None:
        path = find_config(cwd)

    if path is None:
        return PrefixConfig()

    return PrefixConfig.model_validate(read_config_data(path))

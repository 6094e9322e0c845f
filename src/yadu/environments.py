"""
Environments: named, ordered lists of units applied together.

File format (<context>/environments.yaml):

    - name: laptop
      units: [shell, git, neovim]
    - name: server
      units:
        - shell
        - docker
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import yaml

from .context import Context
from .errors import (
    EnvironmentApplyError,
    EnvironmentFileError,
    EnvironmentNotFoundError,
    YaduError,
)
from .model import Environment
from .runner import Runner
from .ui.console import get_console


def _parse_record(path: Path, index: int, record: object) -> Environment:
    if not isinstance(record, dict):
        raise EnvironmentFileError(
            path=path,
            reason=f"entry {index}: expected a mapping, got {type(record).__name__}",
        )

    name = record.get("name")
    if not isinstance(name, str) or not name:
        raise EnvironmentFileError(path=path, reason=f"entry {index}: 'name' must be a non-empty string")

    units = record.get("units") or []
    if not isinstance(units, list) or not all(isinstance(u, str) for u in units):
        raise EnvironmentFileError(
            path=path,
            reason=f"environment '{name}': 'units' must be a list of unit names",
        )

    return Environment(name=name, units=list(units))


def load_environments(path: str | Path) -> List[Environment]:
    """
    Load environment definitions from a YAML file.

    Raises:
        EnvironmentFileError: file missing/unreadable, invalid YAML, or a
            record that isn't `{name: str, units: [str, ...]}`
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise EnvironmentFileError(
            path=path,
            reason=f"failed to read environments file: {e.strerror or e}",
        ) from e

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise EnvironmentFileError(
            path=path,
            reason="failed to parse environments file",
            details=[str(e)],
        ) from e

    if data is None:
        return []
    if not isinstance(data, list):
        raise EnvironmentFileError(
            path=path,
            reason=f"expected a list of environments, got {type(data).__name__}",
        )

    return [_parse_record(path, i, record) for i, record in enumerate(data)]


def find_environment(environments: List[Environment], name: str) -> Environment:
    """First environment called `name` (duplicates after it are ignored)."""
    for env in environments:
        if env.name == name:
            return env
    raise EnvironmentNotFoundError(name)


def apply_environment(
    context: Context,
    runner: Runner,
    name: str,
    environments: Optional[List[Environment]] = None,
) -> Environment:
    """
    Apply every unit of environment `name`, in listed order, dependencies
    included. Nothing runs if the environment can't be found.

    Raises:
        EnvironmentFileError: environments weren't passed and the file is bad
        EnvironmentNotFoundError: no environment called `name`
        EnvironmentApplyError: a unit (or one of its dependencies) failed;
            `cause` holds the underlying error
    """
    console = get_console()
    if environments is None:
        environments = load_environments(context.environments_file)
    env = find_environment(environments, name)

    console.print_environment_header(env.name)
    for unit_name in env.units:
        console.print_environment_unit(unit_name)
        try:
            runner.run_unit(unit_name, include_dependencies=True)
        except YaduError as e:
            raise EnvironmentApplyError(environment=env.name, unit=unit_name, cause=e) from e

    return env

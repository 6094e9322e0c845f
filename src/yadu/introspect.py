# introspect.py
# Asks a unit script about itself without running it.
# The graph builder only talks to the Introspector interface; BashIntrospector
# is the adapter for the shell-function convention units follow:
#
#   description() { echo "Install and configure neovim"; }
#   dependencies() { echo "git fonts"; }
#
#   ... top-level body: the actual work, executed only by the Runner ...

from __future__ import annotations

import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List

from .errors import IntrospectionError
from .ui.console import get_console

DESCRIPTION = "description"
DEPENDENCIES = "dependencies"

# $1 is the unit file, $2 the function to call once it has been sourced.
_QUERY_SCRIPT = 'source "$1" && "$2"'


class Introspector(ABC):
    @abstractmethod
    def description(self, name: str, file: Path) -> str: ...

    @abstractmethod
    def dependencies(self, name: str, file: Path) -> List[str]: ...


class BashIntrospector(Introspector):
    """
    Source a unit in a throwaway shell and call one of its query functions.

    Args:
        shell: Interpreter used to source units (must understand `source`).
    """

    def __init__(self, shell: str = "bash") -> None:
        self.shell = shell

    def _query(self, name: str, file: Path, query: str) -> str:
        """
        Run `query` inside the sourced unit and return its stdout.

        Raises:
            IntrospectionError: if the shell can't start or exits non-zero.
                Sourcing a file that doesn't exist lands here too, so a
                dangling dependency name is reported against that name.
        """
        get_console().print_debug(f"introspect {name}: {query}")
        try:
            proc = subprocess.run(
                [self.shell, "-c", _QUERY_SCRIPT, self.shell, str(file), query],
                text=True,
                capture_output=True,
            )
        except OSError as e:
            raise IntrospectionError(unit=name, query=query, stderr=str(e)) from e

        if proc.returncode != 0:
            raise IntrospectionError(
                unit=name,
                query=query,
                stderr=proc.stderr,
                exit_code=proc.returncode,
            )
        return proc.stdout

    def description(self, name: str, file: Path) -> str:
        return self._query(name, file, DESCRIPTION).strip()

    def dependencies(self, name: str, file: Path) -> List[str]:
        return self._query(name, file, DEPENDENCIES).split()

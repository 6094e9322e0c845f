# runner.py
from __future__ import annotations

import subprocess
from typing import Iterable, List, Set

from .context import Context
from .errors import CycleError, ExecutionError
from .model import Unit
from .ui.console import get_console


# ----------------------------------------------------------------------
# Execution primitives
# ----------------------------------------------------------------------

def _run_script(unit: Unit, ctx: Context, shell: str) -> None:
    """
    Run a unit's script in the foreground.

    stdin/stdout/stderr are inherited so interactive units (sudo prompts,
    installers asking questions) behave as if the user ran them directly.
    """
    try:
        proc = subprocess.run([shell, str(unit.file)], cwd=str(ctx.directory))
    except OSError as e:
        raise ExecutionError(unit=unit.name, reason=str(e)) from e

    if proc.returncode != 0:
        raise ExecutionError(unit=unit.name, exit_code=proc.returncode)


# ----------------------------------------------------------------------
# Public API
# ----------------------------------------------------------------------

class Runner:
    """
    Runs units of a hydrated Context, each at most once.

    The ledger (units that already ran successfully) belongs to the Runner,
    so two Runners over the same Context don't see each other's runs. A unit
    that failed stays out of the ledger and can be attempted again.
    """

    def __init__(self, context: Context, shell: str = "bash") -> None:
        self.context = context
        self.shell = shell
        self.applied: List[str] = []
        self._ledger: Set[str] = set()
        self._stack: List[str] = []

    def has_run(self, name: str) -> bool:
        return name in self._ledger

    def run_unit(self, name: str, include_dependencies: bool = True) -> None:
        """
        Run `name`, and first (depth-first, in recorded order) everything it
        depends on when include_dependencies is set.

        Raises:
            UnitNotFoundError: `name` isn't in the context
            ExecutionError: the unit, or one of its dependencies, failed
            CycleError: `name` was reached again while its own dependencies
                were still running
        """
        console = get_console()
        unit = self.context.get_unit(name)

        if name in self._ledger:
            console.print_debug(f"{name}: already applied, skipping")
            return

        if name in self._stack:
            start = self._stack.index(name)
            raise CycleError(path=self._stack[start:] + [name])

        if include_dependencies:
            self._stack.append(name)
            try:
                for dep in unit.dependencies:
                    self.run_unit(dep, include_dependencies=True)
            finally:
                self._stack.pop()

        console.print_unit_header(unit.name)
        _run_script(unit, self.context, self.shell)

        self._ledger.add(name)
        self.applied.append(name)

    def run_units(self, names: Iterable[str], include_dependencies: bool = True) -> None:
        """Run several units in the given order; stops at the first failure."""
        for name in names:
            self.run_unit(name, include_dependencies=include_dependencies)

# context.py
from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .errors import (
    ContextError,
    CycleError,
    GraphConstructionError,
    IntrospectionError,
    UnitNotFoundError,
)
from .introspect import BashIntrospector, Introspector
from .model import Unit
from .ui.console import get_console

UNITS_DIR = "units"
ENVIRONMENTS_FILE = "environments.yaml"


def is_valid_unit_name(name: str) -> bool:
    """A unit name must name a file directly inside the units directory."""
    return bool(name) and "/" not in name and name not in (".", "..")


class Context:
    """
    The unit graph of one configuration root.

    Owns every Unit (keyed by name); Units refer to their dependencies by name
    only. Build it with Context.hydrate(), which either returns a complete
    graph or raises.
    """

    def __init__(self, directory: str | Path, introspector: Optional[Introspector] = None) -> None:
        self.directory = Path(directory).expanduser().resolve()
        self.introspector = introspector or BashIntrospector()
        self.units: Dict[str, Unit] = {}
        # names whose dependencies are being resolved right now, in recursion order
        self._loading: List[str] = []

    @property
    def units_dir(self) -> Path:
        return self.directory / UNITS_DIR

    @property
    def environments_file(self) -> Path:
        return self.directory / ENVIRONMENTS_FILE

    def unit_file(self, name: str) -> Path:
        return self.units_dir / name

    # ------------------------------------------------------------------
    # Graph construction
    # ------------------------------------------------------------------

    @classmethod
    def hydrate(cls, directory: str | Path, introspector: Optional[Introspector] = None) -> "Context":
        """
        Scan <directory>/units and load every file found there as a unit.

        Units nothing depends on are still part of the graph. Entries are
        visited in sorted order so output and errors are deterministic.

        Raises:
            ContextError: the units directory can't be read
            GraphConstructionError: some unit (or a dependency of one) could
                not be introspected, or the dependencies form a cycle
        """
        ctx = cls(directory, introspector)
        try:
            entries = sorted(os.scandir(ctx.units_dir), key=lambda e: e.name)
        except OSError as e:
            raise ContextError(
                path=ctx.units_dir,
                reason=f"failed to read units directory: {e.strerror or e}",
            ) from e

        for entry in entries:
            if entry.is_dir():
                continue
            try:
                ctx.load_unit(entry.name)
            except IntrospectionError as e:
                raise GraphConstructionError(unit=e.unit, cause=e, via=e.via) from e
            except CycleError as e:
                raise GraphConstructionError(unit=e.path[0], cause=e) from e

        get_console().print_debug(f"hydrated {len(ctx.units)} unit(s) from {ctx.units_dir}")
        return ctx

    def load_unit(self, name: str) -> Unit:
        """
        Return the unit called `name`, introspecting it (and, recursively, its
        dependencies) the first time it is asked for.

        A unit is only added to `units` once all of its dependencies loaded.
        Names that would resolve outside the units directory are rejected
        as an IntrospectionError for that name.
        """
        unit = self.units.get(name)
        if unit is not None:
            return unit

        if name in self._loading:
            start = self._loading.index(name)
            raise CycleError(path=self._loading[start:] + [name])

        if not is_valid_unit_name(name):
            raise IntrospectionError(
                unit=name,
                query="dependencies",
                stderr=f"invalid unit name: {name!r}",
                via=list(self._loading),
            )

        file = self.unit_file(name)
        try:
            deps = self.introspector.dependencies(name, file)
        except IntrospectionError as e:
            # _loading holds exactly the dependents that led to this unit
            e.via = list(self._loading)
            raise

        self._loading.append(name)
        try:
            for dep in deps:
                self.load_unit(dep)
        finally:
            self._loading.pop()

        unit = Unit(name=name, file=file, dependencies=tuple(deps))
        self.units[name] = unit
        return unit

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_unit(self, name: str) -> Unit:
        unit = self.units.get(name)
        if unit is None:
            raise UnitNotFoundError(name)
        return unit

    def dependencies_of(self, name: str) -> List[Unit]:
        return [self.get_unit(dep) for dep in self.get_unit(name).dependencies]

    def describe(self, name: str) -> str:
        unit = self.get_unit(name)
        return self.introspector.description(unit.name, unit.file)

    def units_and_descriptions(self) -> List[Tuple[str, str]]:
        """(name, description) for every unit, sorted by name."""
        return [(name, self.describe(name)) for name in sorted(self.units)]

# model.py
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Tuple


@dataclass(frozen=True)
class Unit:
    """
    A configuration unit: one executable script under <context>/units.

    `dependencies` holds unit *names*, in the order the unit reported them
    (duplicates included). They are resolved against Context.units; a unit
    never owns the units it depends on.
    """
    name: str
    file: Path
    dependencies: Tuple[str, ...] = ()


@dataclass
class Environment:
    """A named, ordered list of unit names applied together."""
    name: str
    units: List[str] = field(default_factory=list)

# errors.py
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional


class YaduError(Exception):
    """Base class for every error raised by yadu."""


class NotFoundError(YaduError):
    pass


@dataclass(eq=False)
class UnitNotFoundError(NotFoundError):
    name: str

    def __str__(self) -> str:
        return f"unit '{self.name}' not found"


@dataclass(eq=False)
class EnvironmentNotFoundError(NotFoundError):
    name: str

    def __str__(self) -> str:
        return f"environment '{self.name}' not found"


@dataclass(eq=False)
class IntrospectionError(YaduError):
    """
    Querying a unit for its description or dependencies failed.

    `stderr` is whatever the shell printed while sourcing the unit, kept so
    the user can see why (syntax error, missing file, undefined function...).
    `via` lists the units whose loading led here, outermost first.
    """
    unit: str
    query: str
    stderr: str = ""
    exit_code: Optional[int] = None
    via: List[str] = field(default_factory=list)

    def __str__(self) -> str:
        msg = f"failed to get {self.query} for '{self.unit}'"
        if self.exit_code is not None:
            msg += f" (exit={self.exit_code})"
        stderr = self.stderr.strip()
        if stderr:
            msg += f": {stderr}"
        return msg


@dataclass(eq=False)
class CycleError(YaduError):
    path: List[str]

    def __str__(self) -> str:
        return "dependency cycle detected: " + " -> ".join(self.path)


@dataclass(eq=False)
class GraphConstructionError(YaduError):
    """
    Hydration aborted; `unit` is the unit whose introspection failed and
    `via` the chain of dependents that pulled it in (outermost first).
    """
    unit: str
    cause: YaduError
    via: List[str] = field(default_factory=list)

    def __str__(self) -> str:
        msg = f"failed to load unit '{self.unit}'"
        if self.via:
            msg += " (required by " + " -> ".join(self.via) + ")"
        return f"{msg}: {self.cause}"


@dataclass(eq=False)
class ExecutionError(YaduError):
    unit: str
    exit_code: Optional[int] = None
    reason: str = ""

    def __str__(self) -> str:
        msg = f"execution of '{self.unit}' failed"
        if self.exit_code is not None:
            msg += f" (exit={self.exit_code})"
        if self.reason:
            msg += f": {self.reason}"
        return msg


@dataclass(eq=False)
class EnvironmentApplyError(YaduError):
    environment: str
    unit: str
    cause: YaduError

    def __str__(self) -> str:
        return f"environment '{self.environment}': failed to apply unit '{self.unit}': {self.cause}"


@dataclass(eq=False)
class FileFormatError(YaduError):
    path: Optional[Path]
    reason: str
    details: List[str] = field(default_factory=list)

    def __str__(self) -> str:
        if self.path is None:
            return self.reason
        return f"{self.path}: {self.reason}"


class EnvironmentFileError(FileFormatError):
    pass


class SettingsError(FileFormatError):
    pass


class ContextError(FileFormatError):
    pass

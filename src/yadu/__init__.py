from .context import Context
from .environments import apply_environment, find_environment, load_environments
from .introspect import BashIntrospector, Introspector
from .model import Environment, Unit
from .runner import Runner

__all__ = [
    "Context",
    "Runner",
    "Unit",
    "Environment",
    "Introspector",
    "BashIntrospector",
    "apply_environment",
    "find_environment",
    "load_environments",
]

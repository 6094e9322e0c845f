# scaffold.py
from __future__ import annotations

import os
import shlex
from typing import Sequence

from .context import Context, is_valid_unit_name
from .errors import ContextError

# User-supplied values are shell-quoted before formatting into this.
UNIT_TEMPLATE = """\
#!/usr/bin/env bash
# yadu unit: {name}

description() {{
    echo {description}
}}

dependencies() {{
    echo {dependencies}
}}

# `yadu list` sources this file to call the functions above; keep the
# actual work below this guard so that doesn't run it.
[[ "${{BASH_SOURCE[0]}}" == "$0" ]] || return 0

set -euo pipefail

echo {applying}
"""


def _check_name(ctx: Context, name: str) -> None:
    # whitespace would break the header comment and the dependency list
    if not is_valid_unit_name(name) or any(c.isspace() for c in name):
        raise ContextError(path=ctx.units_dir, reason=f"invalid unit name: {name!r}")


def render_unit(name: str, description: str = "", dependencies: Sequence[str] = ()) -> str:
    return UNIT_TEMPLATE.format(
        name=name,
        description=shlex.quote(description or f"{name} unit"),
        dependencies=shlex.quote(" ".join(dependencies)),
        applying=shlex.quote(f"applying {name}"),
    )


def create_unit(
    ctx: Context,
    name: str,
    description: str = "",
    dependencies: Sequence[str] = (),
    mode: int = 0o755,
):
    """Write a new executable unit file from the template; never overwrites."""
    _check_name(ctx, name)
    for dep in dependencies:
        _check_name(ctx, dep)

    path = ctx.unit_file(name)
    if path.exists():
        raise ContextError(path=path, reason=f"unit '{name}' already exists")

    ctx.units_dir.mkdir(parents=True, exist_ok=True)
    with path.open("x", encoding="utf-8") as f:
        f.write(render_unit(name, description, dependencies))
    os.chmod(path, mode)
    return path

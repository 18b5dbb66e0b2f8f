"""Upload, execute, and clean up setup scripts."""

from __future__ import annotations

from collections.abc import Sequence

from fedimg.containers import ContainerT as C
from fedimg.errors import FedimgError
from fedimg.models import Script
from fedimg.policy import BuildPaths


def run_scripts(container: C, scripts: Sequence[Script], *, paths: BuildPaths | None = None) -> C:
    paths = paths or BuildPaths()
    for script in scripts:
        target = paths.script_path(script.name)
        try:
            container = container.with_file(target, script.source).with_exec([target])
        except FedimgError as exc:
            raise exc.annotate(script=script.name)
    return container


def cleanup_scripts(
    container: C,
    scripts: Sequence[Script],
    *,
    paths: BuildPaths | None = None,
) -> C:
    """Remove every uploaded script path in a single command."""
    paths = paths or BuildPaths()
    if not scripts:
        return container
    return container.with_exec(["rm", "-f", *(paths.script_path(s.name) for s in scripts)])

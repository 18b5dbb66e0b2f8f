"""Containerfile emission for accumulated container states.

Produces a build directory holding:
- ``Containerfile`` with one instruction per recorded container operation
- ``context/`` with every copied or inline file referenced by the instructions
"""

from __future__ import annotations

import json
import shutil
from dataclasses import dataclass
from pathlib import Path

from fedimg.containers.containerfile import (
    BindMount,
    ContainerfileContainer,
    ContextEntry,
    Instruction,
)
from fedimg.errors import ExecutionError, ValidationError

CONTEXT_DIRNAME = "context"


@dataclass(frozen=True, slots=True)
class ContainerfileEmission:
    root: Path
    containerfile: Path
    context_dir: Path


def render_containerfile(container: ContainerfileContainer) -> str:
    """Render the instruction list as Containerfile text."""
    lines = [f"FROM {container.image}"]
    for instruction in container.instructions:
        lines.append(_render_instruction(instruction))
    return "\n".join(lines) + "\n"


def emit_containerfile(
    container: ContainerfileContainer,
    destination: str | Path,
    *,
    force: bool = False,
) -> ContainerfileEmission:
    root = Path(destination)
    containerfile = root / "Containerfile"
    context_dir = root / CONTEXT_DIRNAME
    if context_dir.exists():
        if not force:
            raise ValidationError(
                "Emission destination already contains a build context.",
                hint="Pass force=True or choose an empty directory.",
                context={"operation": "emit_containerfile", "path": str(root)},
            )
        shutil.rmtree(context_dir)
    context_dir.mkdir(parents=True)

    for entry in container.context:
        _write_context_entry(entry, context_dir)

    containerfile.write_text(render_containerfile(container), encoding="utf-8")
    return ContainerfileEmission(root=root, containerfile=containerfile, context_dir=context_dir)


def _render_instruction(instruction: Instruction) -> str:
    if instruction.kind == "copy":
        flags: list[str] = []
        if instruction.owner:
            flags.append(f"--chown={instruction.owner}")
        if instruction.permissions is not None:
            flags.append(f"--chmod={instruction.permissions:04o}")
        source = f"{CONTEXT_DIRNAME}/{instruction.source}"
        parts = ["COPY", *flags, source, str(instruction.destination)]
        return " ".join(parts)
    if instruction.kind == "run":
        mounts = " ".join(_render_mount(mount) for mount in instruction.mounts)
        prefix = f"RUN {mounts} " if mounts else "RUN "
        return prefix + json.dumps(list(instruction.argv))
    if instruction.kind == "label":
        return f"LABEL {json.dumps(instruction.name)}={json.dumps(instruction.value)}"
    raise ValidationError(
        "Unknown Containerfile instruction kind.",
        context={"operation": "render_containerfile", "kind": str(instruction.kind)},
    )


def _render_mount(mount: BindMount) -> str:
    return (
        f"--mount=type=bind,source={CONTEXT_DIRNAME}/{mount.context_name},"
        f"target={mount.target},readonly"
    )


def _write_context_entry(entry: ContextEntry, context_dir: Path) -> None:
    target = context_dir / entry.name
    if entry.contents is not None:
        target.write_bytes(entry.contents)
        return
    if entry.source is None:
        raise ValidationError(
            "Context entry has neither a source nor inline contents.",
            context={"operation": "emit_containerfile", "entry": entry.name},
        )
    try:
        if entry.source.is_dir():
            shutil.copytree(entry.source, target, symlinks=True)
        else:
            shutil.copy2(entry.source, target)
    except OSError as exc:
        raise ExecutionError(
            "Failed to stage build context entry.",
            context={
                "operation": "emit_containerfile",
                "entry": entry.name,
                "source": str(entry.source),
                "error": str(exc),
            },
        ) from exc

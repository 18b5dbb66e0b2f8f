"""Container state that accumulates Containerfile instructions.

Nothing runs until the state is emitted and handed to an engine (see
``fedimg.containers.podman``), so command failures surface at build time.
Base image labels are captured once when the state is created and answer
``label()`` lookups together with labels set afterward.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Literal, Self

from fedimg.errors import ExecutionError

InstructionKind = Literal["copy", "run", "label"]


@dataclass(frozen=True, slots=True)
class ContextEntry:
    """A build context member, either copied from the host or written inline."""

    name: str
    source: Path | None = None
    contents: bytes | None = None


@dataclass(frozen=True, slots=True)
class BindMount:
    context_name: str
    target: str
    owner: str | None = None


@dataclass(frozen=True, slots=True)
class Instruction:
    kind: InstructionKind
    argv: tuple[str, ...] = ()
    source: str | None = None
    destination: str | None = None
    owner: str | None = None
    permissions: int | None = None
    mounts: tuple[BindMount, ...] = ()
    name: str | None = None
    value: str | None = None


@dataclass(frozen=True, slots=True)
class ContainerfileContainer:
    image: str
    base_labels: Mapping[str, str] = field(default_factory=dict)
    labels: Mapping[str, str] = field(default_factory=dict)
    instructions: tuple[Instruction, ...] = ()
    context: tuple[ContextEntry, ...] = ()
    mounts: tuple[BindMount, ...] = ()

    def label(self, name: str) -> str:
        if name in self.labels:
            return self.labels[name]
        return self.base_labels.get(name, "")

    def with_directory(self, path: str, source: Path) -> Self:
        source = Path(source)
        if not source.is_dir():
            raise ExecutionError(
                "Directory source does not exist.",
                context={"operation": "with_directory", "path": path, "source": str(source)},
            )
        entry = self._context_entry(source.name, source=source)
        return self._append(
            Instruction(kind="copy", source=entry.name, destination=path),
            entry=entry,
        )

    def with_file(self, path: str, source: Path) -> Self:
        source = Path(source)
        if not source.is_file():
            raise ExecutionError(
                "File source does not exist.",
                context={"operation": "with_file", "path": path, "source": str(source)},
            )
        entry = self._context_entry(source.name, source=source)
        return self._append(
            Instruction(kind="copy", source=entry.name, destination=path),
            entry=entry,
        )

    def with_new_file(
        self,
        path: str,
        contents: str,
        *,
        permissions: int = 0o644,
        owner: str | None = None,
    ) -> Self:
        entry = self._context_entry(Path(path).name, contents=contents.encode("utf-8"))
        return self._append(
            Instruction(
                kind="copy",
                source=entry.name,
                destination=path,
                owner=owner,
                permissions=permissions,
            ),
            entry=entry,
        )

    def with_mounted_file(self, path: str, source: Path, *, owner: str | None = None) -> Self:
        entry = self._context_entry(Path(source).name, source=Path(source))
        mount = BindMount(context_name=entry.name, target=path, owner=owner)
        return replace(
            self,
            context=self.context + (entry,),
            mounts=self.mounts + (mount,),
        )

    def with_exec(self, argv: Sequence[str]) -> Self:
        command = tuple(argv)
        if not command:
            raise ExecutionError(
                "with_exec() requires a non-empty command vector.",
                context={"operation": "with_exec"},
            )
        return self._append(Instruction(kind="run", argv=command, mounts=self.mounts))

    def with_label(self, name: str, value: str) -> Self:
        labels = dict(self.labels)
        labels[name] = value
        return replace(
            self,
            labels=labels,
            instructions=self.instructions + (Instruction(kind="label", name=name, value=value),),
        )

    def _context_entry(
        self,
        basename: str,
        *,
        source: Path | None = None,
        contents: bytes | None = None,
    ) -> ContextEntry:
        # Index prefix keeps context names unique when basenames repeat.
        name = f"{len(self.context):03d}-{basename}"
        return ContextEntry(name=name, source=source, contents=contents)

    def _append(self, instruction: Instruction, *, entry: ContextEntry | None = None) -> Self:
        context = self.context if entry is None else self.context + (entry,)
        return replace(self, instructions=self.instructions + (instruction,), context=context)

"""In-process container state for testing and dry runs.

Applies every operation to an in-memory, append-only record instead of a real
container engine. The flat filesystem view is kept per path (last write wins),
and ``rm`` commands drop the named paths so cleanup stages are observable.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field, replace
from pathlib import Path, PurePosixPath
from typing import Literal, Self

from fedimg.errors import ExecutionError

OperationKind = Literal["directory", "file", "new_file", "mounted_file", "exec", "label"]
ExecHook = Callable[[tuple[str, ...]], None]


@dataclass(frozen=True, slots=True)
class Operation:
    kind: OperationKind
    path: str | None = None
    argv: tuple[str, ...] = ()
    value: str | None = None


@dataclass(frozen=True, slots=True)
class FileRecord:
    content: bytes
    permissions: int | None = None
    owner: str | None = None


@dataclass(frozen=True, slots=True)
class InProcessContainer:
    image: str
    labels: Mapping[str, str] = field(default_factory=dict)
    files: Mapping[str, FileRecord] = field(default_factory=dict)
    operations: tuple[Operation, ...] = ()
    exec_hook: ExecHook | None = field(default=None, compare=False, repr=False)

    @property
    def commands(self) -> tuple[tuple[str, ...], ...]:
        return tuple(op.argv for op in self.operations if op.kind == "exec")

    def read_text(self, path: str) -> str:
        record = self.files.get(path)
        if record is None:
            raise KeyError(path)
        return record.content.decode("utf-8")

    def label(self, name: str) -> str:
        return self.labels.get(name, "")

    def with_directory(self, path: str, source: Path) -> Self:
        source = Path(source)
        if not source.is_dir():
            raise ExecutionError(
                "Directory source does not exist.",
                context={"operation": "with_directory", "path": path, "source": str(source)},
            )
        files = dict(self.files)
        for item in sorted(source.rglob("*")):
            if not item.is_file():
                continue
            relative = item.relative_to(source).as_posix()
            files[str(PurePosixPath(path) / relative)] = FileRecord(content=item.read_bytes())
        return self._append(Operation(kind="directory", path=path, value=str(source)), files=files)

    def with_file(self, path: str, source: Path) -> Self:
        source = Path(source)
        if not source.is_file():
            raise ExecutionError(
                "File source does not exist.",
                context={"operation": "with_file", "path": path, "source": str(source)},
            )
        files = dict(self.files)
        files[path] = FileRecord(content=source.read_bytes())
        return self._append(Operation(kind="file", path=path, value=str(source)), files=files)

    def with_new_file(
        self,
        path: str,
        contents: str,
        *,
        permissions: int = 0o644,
        owner: str | None = None,
    ) -> Self:
        files = dict(self.files)
        files[path] = FileRecord(
            content=contents.encode("utf-8"),
            permissions=permissions,
            owner=owner,
        )
        return self._append(Operation(kind="new_file", path=path), files=files)

    def with_mounted_file(self, path: str, source: Path, *, owner: str | None = None) -> Self:
        return self._append(Operation(kind="mounted_file", path=path, value=str(source)))

    def with_exec(self, argv: Sequence[str]) -> Self:
        command = tuple(argv)
        if not command:
            raise ExecutionError(
                "with_exec() requires a non-empty command vector.",
                context={"operation": "with_exec"},
            )
        if self.exec_hook is not None:
            self.exec_hook(command)
        files = dict(self.files)
        if command[0] == "rm":
            for target in command[1:]:
                if not target.startswith("-"):
                    files.pop(target, None)
        return self._append(Operation(kind="exec", argv=command), files=files)

    def with_label(self, name: str, value: str) -> Self:
        labels = dict(self.labels)
        labels[name] = value
        return self._append(Operation(kind="label", path=name, value=value), labels=labels)

    def _append(
        self,
        operation: Operation,
        *,
        files: Mapping[str, FileRecord] | None = None,
        labels: Mapping[str, str] | None = None,
    ) -> Self:
        return replace(
            self,
            operations=self.operations + (operation,),
            files=self.files if files is None else files,
            labels=self.labels if labels is None else labels,
        )


@dataclass(slots=True)
class InProcessRuntime:
    """Runtime that serves base image labels from a static mapping."""

    name: str = "inprocess"
    images: Mapping[str, Mapping[str, str]] = field(default_factory=dict)
    exec_hook: ExecHook | None = None

    def from_image(self, image: str) -> InProcessContainer:
        return InProcessContainer(
            image=image,
            labels=dict(self.images.get(image, {})),
            exec_hook=self.exec_hook,
        )

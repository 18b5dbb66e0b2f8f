"""Podman-backed container runtime.

Base image labels are read with ``podman image inspect`` when the state is
created; the accumulated Containerfile is built with ``podman build``.
"""

from __future__ import annotations

import json
import shutil
import subprocess
import tempfile
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from fedimg.compiler import emit_containerfile
from fedimg.containers.base import Container
from fedimg.containers.containerfile import ContainerfileContainer
from fedimg.errors import ExecutionError


@dataclass(slots=True)
class PodmanRuntime:
    name: str = "podman"
    binary: str = "podman"
    pull: bool = True
    build_args: list[str] = field(default_factory=list)

    def from_image(self, image: str) -> ContainerfileContainer:
        self._ensure_available()
        if self.pull:
            self._run([self.binary, "pull", "--quiet", image], operation="pull")
        stdout = self._run(
            [self.binary, "image", "inspect", "--format", "{{json .Labels}}", image],
            operation="inspect",
        )
        try:
            labels = json.loads(stdout or "null") or {}
        except json.JSONDecodeError as exc:
            raise ExecutionError(
                "podman image inspect returned invalid JSON.",
                context={"backend": self.name, "operation": "inspect", "image": image},
            ) from exc
        return ContainerfileContainer(image=image, base_labels=dict(labels))

    def build(
        self,
        container: Container,
        *,
        tags: Sequence[str] = (),
        build_dir: str | Path | None = None,
    ) -> str:
        """Build the accumulated Containerfile and return the image id."""
        if not isinstance(container, ContainerfileContainer):
            raise ExecutionError(
                "podman build needs a Containerfile state.",
                hint="Create the base state with PodmanRuntime.from_image().",
                context={
                    "backend": self.name,
                    "operation": "build",
                    "type": type(container).__name__,
                },
            )
        self._ensure_available()
        if build_dir is None:
            with tempfile.TemporaryDirectory(prefix="fedimg-build-") as tmp:
                return self._build_in(container, tags=tags, root=Path(tmp))
        return self._build_in(container, tags=tags, root=Path(build_dir))

    def _build_in(
        self,
        container: ContainerfileContainer,
        *,
        tags: Sequence[str],
        root: Path,
    ) -> str:
        emission = emit_containerfile(container, root, force=True)
        iidfile = root / "image.iid"
        cmd = [
            self.binary,
            "build",
            "--file",
            str(emission.containerfile),
            "--iidfile",
            str(iidfile),
        ]
        for tag in tags:
            cmd.extend(["--tag", tag])
        cmd.extend([*self.build_args, str(emission.root)])
        self._run(cmd, operation="build")
        return iidfile.read_text(encoding="utf-8").strip()

    def _run(self, cmd: list[str], *, operation: str) -> str:
        result = subprocess.run(cmd, capture_output=True, text=True, check=False)
        if result.returncode != 0:
            raise ExecutionError(
                f"podman {operation} failed.",
                hint="Check podman output for details.",
                context={
                    "backend": self.name,
                    "operation": operation,
                    "returncode": str(result.returncode),
                    "stderr": result.stderr[:2000] if result.stderr else "",
                    "command": " ".join(cmd),
                },
            )
        return result.stdout.strip()

    def _ensure_available(self) -> None:
        if shutil.which(self.binary) is None:
            raise ExecutionError(
                f"Podman runtime requires `{self.binary}` in PATH.",
                hint="Install podman or use InProcessRuntime for dry runs.",
                context={"backend": self.name, "operation": "prepare"},
            )

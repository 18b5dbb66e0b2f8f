"""Protocols for the container execution collaborator.

Every ``with_*`` call returns a new container state; implementations never
mutate the receiver. Failures surface as ``ExecutionError``.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Protocol, Self, TypeVar


class Container(Protocol):
    image: str

    def with_directory(self, path: str, source: Path) -> Self:
        """Copy a host directory tree to ``path``."""

    def with_file(self, path: str, source: Path) -> Self:
        """Copy a host file to ``path``."""

    def with_new_file(
        self,
        path: str,
        contents: str,
        *,
        permissions: int = 0o644,
        owner: str | None = None,
    ) -> Self:
        """Write ``contents`` as a new file at ``path``."""

    def with_mounted_file(self, path: str, source: Path, *, owner: str | None = None) -> Self:
        """Expose a host file at ``path`` without persisting it in the image."""

    def with_exec(self, argv: Sequence[str]) -> Self:
        """Run a command vector inside the container."""

    def with_label(self, name: str, value: str) -> Self:
        """Set an image label."""

    def label(self, name: str) -> str:
        """Return a label value, or an empty string when absent."""


ContainerT = TypeVar("ContainerT", bound=Container)


class ContainerRuntime(Protocol):
    name: str

    def from_image(self, image: str) -> Container:
        """Return the container state for a base image reference."""

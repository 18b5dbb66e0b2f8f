"""Core typed dataclasses for build instructions and the build spec snapshot."""

from __future__ import annotations

import posixpath
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlsplit

DESCRIPTION_LABEL = "org.opencontainers.image.description"
OSTREE_BOOTABLE_LABEL = "ostree.bootable"
VERSION_LABELS = ("version", "org.opencontainers.image.version")


@dataclass(frozen=True, slots=True)
class DirectoryMount:
    source: Path
    destination: str


@dataclass(frozen=True, slots=True)
class FileMount:
    source: Path
    destination: str


@dataclass(frozen=True, slots=True)
class Repo:
    url: str
    file_name: str
    keep: bool = False

    @classmethod
    def from_url(cls, url: str, *, keep: bool = False) -> Repo:
        path = urlsplit(url).path.rstrip("/")
        return cls(url=url, file_name=posixpath.basename(path), keep=keep)


@dataclass(frozen=True, slots=True)
class PackageSwap:
    remove: str
    install: str


@dataclass(frozen=True, slots=True)
class Script:
    source: Path
    name: str

    @classmethod
    def from_path(cls, path: str | Path) -> Script:
        source = Path(path)
        return cls(source=source, name=source.name)


@dataclass(frozen=True, slots=True)
class Label:
    name: str
    value: str


@dataclass(frozen=True, slots=True)
class ImageCoordinate:
    registry: str
    variant: str
    tag: str
    org: str | None = None
    suffix: str | None = None

    @property
    def address(self) -> str:
        """registry/[org/]variant[-suffix]:tag"""
        name = self.variant if self.suffix is None else f"{self.variant}-{self.suffix}"
        if self.org is not None:
            return f"{self.registry}/{self.org}/{name}:{self.tag}"
        return f"{self.registry}/{name}:{self.tag}"


@dataclass(frozen=True, slots=True)
class BuildSpec:
    """Immutable snapshot of every accumulated instruction.

    ``packages_installed`` and ``packages_removed`` are ``None`` until assigned;
    an assigned empty tuple still counts as a registered package operation.
    """

    coordinate: ImageCoordinate
    date: str
    base_image: str
    base_image_version: str = ""
    release_version: str | None = None
    directories: tuple[DirectoryMount, ...] = ()
    files: tuple[FileMount, ...] = ()
    repos: tuple[Repo, ...] = ()
    package_groups_installed: tuple[str, ...] = ()
    package_groups_removed: tuple[str, ...] = ()
    packages_installed: tuple[str, ...] | None = None
    packages_removed: tuple[str, ...] | None = None
    packages_swapped: tuple[PackageSwap, ...] = ()
    scripts_pre: tuple[Script, ...] = ()
    scripts_post: tuple[Script, ...] = ()
    exec_pre: tuple[tuple[str, ...], ...] = ()
    exec_post: tuple[tuple[str, ...], ...] = ()
    labels: tuple[Label, ...] = ()

    @property
    def installs(self) -> tuple[str, ...]:
        return self.packages_installed or ()

    @property
    def removes(self) -> tuple[str, ...]:
        return self.packages_removed or ()

    @property
    def has_package_operations(self) -> bool:
        return (
            self.packages_installed is not None
            or self.packages_removed is not None
            or bool(self.packages_swapped)
            or bool(self.package_groups_installed)
            or bool(self.package_groups_removed)
        )

    @property
    def scripts(self) -> tuple[Script, ...]:
        """Union of pre and post scripts, pre first."""
        return self.scripts_pre + self.scripts_post


__all__ = [
    "BuildSpec",
    "DESCRIPTION_LABEL",
    "DirectoryMount",
    "FileMount",
    "ImageCoordinate",
    "Label",
    "OSTREE_BOOTABLE_LABEL",
    "PackageSwap",
    "Repo",
    "Script",
    "VERSION_LABELS",
]

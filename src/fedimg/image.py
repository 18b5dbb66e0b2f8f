"""Fluent image builder that accumulates instructions and runs the pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import partial
from pathlib import Path
from typing import Self

from .containers import Container, ContainerRuntime, PodmanRuntime
from .errors import ValidationError
from .fetch import Fetcher, http_get
from .models import (
    DESCRIPTION_LABEL,
    BuildSpec,
    DirectoryMount,
    FileMount,
    ImageCoordinate,
    Label,
    PackageSwap,
    Repo,
    Script,
)
from .observability import StructuredLogger
from .pipeline import execute
from .policy import BuildPaths, Policy
from .version import (
    build_date,
    default_tags,
    release_from_version,
    resolve_versions,
    version_from_labels,
)


@dataclass(slots=True)
class Image:
    """Accumulates build instructions for an image derived from a base image.

    Mutators only record instructions and return the same builder. Nothing
    touches a container until ``build()``.
    """

    registry: str = "quay.io"
    variant: str = "fedora"
    tag: str = "latest"
    org: str | None = "fedora"
    suffix: str | None = None
    date: str = field(default_factory=build_date)
    runtime: ContainerRuntime = field(default_factory=PodmanRuntime)
    policy: Policy = field(default_factory=Policy)
    paths: BuildPaths = field(default_factory=BuildPaths)
    logger: StructuredLogger = field(default_factory=StructuredLogger)
    fetcher: Fetcher | None = None
    _directories: list[DirectoryMount] = field(init=False, default_factory=list, repr=False)
    _files: list[FileMount] = field(init=False, default_factory=list, repr=False)
    _repos: list[Repo] = field(init=False, default_factory=list, repr=False)
    _groups_installed: list[str] = field(init=False, default_factory=list, repr=False)
    _groups_removed: list[str] = field(init=False, default_factory=list, repr=False)
    _packages_installed: tuple[str, ...] | None = field(init=False, default=None, repr=False)
    _packages_removed: tuple[str, ...] | None = field(init=False, default=None, repr=False)
    _swaps: list[PackageSwap] = field(init=False, default_factory=list, repr=False)
    _scripts_pre: list[Script] = field(init=False, default_factory=list, repr=False)
    _scripts_post: list[Script] = field(init=False, default_factory=list, repr=False)
    _exec_pre: list[tuple[str, ...]] = field(init=False, default_factory=list, repr=False)
    _exec_post: list[tuple[str, ...]] = field(init=False, default_factory=list, repr=False)
    _labels: list[Label] = field(init=False, default_factory=list, repr=False)
    _base: Container | None = field(init=False, default=None, repr=False)
    _version: str | None = field(init=False, default=None, repr=False)
    _release: str | None = field(init=False, default=None, repr=False)

    @property
    def coordinate(self) -> ImageCoordinate:
        return ImageCoordinate(
            registry=self.registry,
            org=self.org,
            variant=self.variant,
            suffix=self.suffix,
            tag=self.tag,
        )

    @property
    def base_image(self) -> str:
        return self.coordinate.address

    # -- instruction accumulation -------------------------------------------------

    def directory(self, destination: str, source: str | Path) -> Self:
        self._require(destination, "directory() requires a destination path.")
        self._directories.append(DirectoryMount(source=Path(source), destination=destination))
        return self

    def file(self, destination: str, source: str | Path) -> Self:
        self._require(destination, "file() requires a destination path.")
        self._files.append(FileMount(source=Path(source), destination=destination))
        return self

    def repos(self, *urls: str, keep: bool = False) -> Self:
        """Register repo definition URLs; unless ``keep`` they are removed after packages."""
        for url in urls:
            self._require(url, "repos() URLs must be non-empty.")
            repo = Repo.from_url(url, keep=keep)
            if not repo.file_name:
                raise ValidationError(
                    "repos() URL has no file name in its path.",
                    context={"operation": "repos", "url": url},
                )
            self._repos.append(repo)
        return self

    def install_groups(self, *groups: str) -> Self:
        """Install package groups (skipped on ostree-based images)."""
        self._groups_installed.extend(groups)
        return self

    def remove_groups(self, *groups: str) -> Self:
        """Remove package groups (skipped on ostree-based images)."""
        self._groups_removed.extend(groups)
        return self

    def install(self, *packages: str) -> Self:
        """Set the packages to install, replacing any earlier call."""
        self._packages_installed = tuple(packages)
        return self

    def remove(self, *packages: str) -> Self:
        """Set the packages to remove, replacing any earlier call."""
        self._packages_removed = tuple(packages)
        return self

    def swap(self, remove: str, install: str) -> Self:
        """Replace ``remove`` with ``install`` in one transaction.

        Equivalent to ``dnf swap <remove> <install>`` or, on ostree-based images,
        ``rpm-ostree override remove <remove> --install <install>``.
        """
        self._require(remove, "swap() requires the package to remove.")
        self._require(install, "swap() requires the package to install.")
        self._swaps.append(PackageSwap(remove=remove, install=install))
        return self

    def script_pre(self, path: str | Path) -> Self:
        self._scripts_pre.append(Script.from_path(path))
        return self

    def script_post(self, path: str | Path) -> Self:
        self._scripts_post.append(Script.from_path(path))
        return self

    def exec_pre(self, *argv: str) -> Self:
        self._require(argv, "exec_pre() requires a command argv.")
        self._exec_pre.append(tuple(argv))
        return self

    def exec_post(self, *argv: str) -> Self:
        self._require(argv, "exec_post() requires a command argv.")
        self._exec_post.append(tuple(argv))
        return self

    def label(self, name: str, value: str) -> Self:
        self._require(name, "label() requires a label name.")
        self._labels.append(Label(name=name, value=value))
        return self

    def description(self, text: str) -> Self:
        return self.label(DESCRIPTION_LABEL, text)

    # -- version resolution -------------------------------------------------------

    def base_container(self) -> Container:
        if self._base is None:
            self._base = self.runtime.from_image(self.base_image)
        return self._base

    def resolve(self) -> Self:
        """Resolve base image version (required) and release (optional)."""
        self._version, self._release = resolve_versions(self.base_container())
        self.logger.log(
            operation="resolve_versions",
            stage=None,
            resource=self.base_image,
            message="Resolved base image version.",
            extra={"version": self._version, "release": self._release},
        )
        return self

    def version(self, container: Container | None = None) -> str:
        """Return the base image version, or the version of ``container`` when given."""
        if container is not None:
            return version_from_labels(container)
        if self._version is None:
            self.resolve()
        return str(self._version)

    def release(self, container: Container | None = None) -> str:
        """Return the release identifier; raises when it cannot be derived."""
        return release_from_version(self.version(container))

    def default_tags(self, *, latest: bool = False) -> list[str]:
        """Tags as ``[release, release-date,] date[, latest]``."""
        self.version()
        return default_tags(self._release, self.date, latest=latest)

    # -- execution ----------------------------------------------------------------

    def spec(self) -> BuildSpec:
        """Return an immutable snapshot of the accumulated instructions."""
        version = self.version()
        return BuildSpec(
            coordinate=self.coordinate,
            date=self.date,
            base_image=self.base_image,
            base_image_version=version,
            release_version=self._release,
            directories=tuple(self._directories),
            files=tuple(self._files),
            repos=tuple(self._repos),
            package_groups_installed=tuple(self._groups_installed),
            package_groups_removed=tuple(self._groups_removed),
            packages_installed=self._packages_installed,
            packages_removed=self._packages_removed,
            packages_swapped=tuple(self._swaps),
            scripts_pre=tuple(self._scripts_pre),
            scripts_post=tuple(self._scripts_post),
            exec_pre=tuple(self._exec_pre),
            exec_post=tuple(self._exec_post),
            labels=tuple(self._labels),
        )

    def build(self, source: str | Container | None = None) -> Container:
        """Run the pipeline from ``source`` (default: the base image) and return the result.

        ``source`` may be an image reference or an existing container state.
        """
        spec = self.spec()
        if source is None:
            container = self.base_container()
        elif isinstance(source, str):
            container = self.runtime.from_image(source)
        else:
            container = source
        fetcher = self.fetcher or partial(http_get, policy=self.policy)
        return execute(spec, container, fetcher=fetcher, paths=self.paths, logger=self.logger)

    def _require(self, value: object, message: str) -> None:
        if not value:
            raise ValidationError(message)

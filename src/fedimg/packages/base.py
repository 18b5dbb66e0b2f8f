"""Protocol for package manager strategies."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from fedimg.containers import ContainerT as C
from fedimg.models import BuildSpec, PackageSwap
from fedimg.observability import StructuredLogger

PACKAGES_STAGE = "packages"


class PackageManager(Protocol):
    name: str

    def install(self, container: C, packages: Sequence[str]) -> C:
        """Install packages in one transaction."""

    def remove(self, container: C, packages: Sequence[str]) -> C:
        """Remove packages in one transaction."""

    def swap(self, container: C, swap: PackageSwap) -> C:
        """Replace one package with another in one transaction."""

    def install_groups(self, container: C, groups: Sequence[str]) -> C:
        """Install package groups."""

    def remove_groups(self, container: C, groups: Sequence[str]) -> C:
        """Remove package groups."""

    def apply(
        self,
        container: C,
        spec: BuildSpec,
        *,
        logger: StructuredLogger | None = None,
    ) -> C:
        """Apply every package operation of ``spec`` in this backend's order."""

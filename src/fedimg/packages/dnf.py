"""Mutable package manager backend driven by ``dnf``."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from fedimg.containers import ContainerT as C
from fedimg.models import BuildSpec, PackageSwap
from fedimg.observability import StructuredLogger
from fedimg.packages.base import PACKAGES_STAGE


@dataclass(frozen=True, slots=True)
class DnfPackageManager:
    name: str = "dnf"
    binary: str = "dnf"

    def install(self, container: C, packages: Sequence[str]) -> C:
        return container.with_exec([self.binary, "-y", "install", *packages])

    def remove(self, container: C, packages: Sequence[str]) -> C:
        return container.with_exec([self.binary, "-y", "remove", *packages])

    def swap(self, container: C, swap: PackageSwap) -> C:
        return container.with_exec([self.binary, "-y", "swap", swap.remove, swap.install])

    def install_groups(self, container: C, groups: Sequence[str]) -> C:
        return container.with_exec([self.binary, "-y", "group", "install", *groups])

    def remove_groups(self, container: C, groups: Sequence[str]) -> C:
        return container.with_exec([self.binary, "-y", "group", "remove", *groups])

    def upgrade(self, container: C) -> C:
        return container.with_exec([self.binary, "-y", "upgrade"])

    def clean(self, container: C) -> C:
        return container.with_exec([self.binary, "clean", "all"])

    def apply(
        self,
        container: C,
        spec: BuildSpec,
        *,
        logger: StructuredLogger | None = None,
    ) -> C:
        if spec.package_groups_removed:
            container = self.remove_groups(container, spec.package_groups_removed)

        # dnf swap only takes a single remove/install pair, so bulk removals
        # and installs run as separate transactions.
        if spec.removes:
            container = self.remove(container, spec.removes)

        if spec.package_groups_installed or spec.installs:
            container = self.upgrade(container)

        if spec.package_groups_installed:
            container = self.install_groups(container, spec.package_groups_installed)

        if spec.installs:
            container = self.install(container, spec.installs)

        for swap in spec.packages_swapped:
            container = self.swap(container, swap)
            if logger is not None:
                logger.log(
                    operation="package_swap",
                    stage=PACKAGES_STAGE,
                    resource=f"{swap.remove}->{swap.install}",
                    message="Swapped package.",
                )

        return self.clean(container)

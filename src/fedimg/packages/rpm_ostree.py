"""Atomic package manager backend for ostree-based images.

``rpm-ostree override remove`` accepts ``--install`` modifiers, so removals and
installs requested together run as a single atomic substitution. Package
groups are not supported by this backend.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from fedimg.containers import ContainerT as C
from fedimg.errors import ValidationError
from fedimg.models import BuildSpec, PackageSwap
from fedimg.observability import StructuredLogger
from fedimg.packages.base import PACKAGES_STAGE


@dataclass(frozen=True, slots=True)
class RpmOstreePackageManager:
    name: str = "rpm-ostree"
    binary: str = "rpm-ostree"

    def install(self, container: C, packages: Sequence[str]) -> C:
        return container.with_exec([self.binary, "install", *packages])

    def remove(self, container: C, packages: Sequence[str]) -> C:
        return container.with_exec([self.binary, "override", "remove", *packages])

    def replace(self, container: C, remove: Sequence[str], install: Sequence[str]) -> C:
        """Remove and install in one override transaction."""
        argv = [self.binary, "override", "remove", *remove]
        argv.extend(f"--install={package}" for package in install)
        return container.with_exec(argv)

    def swap(self, container: C, swap: PackageSwap) -> C:
        return container.with_exec(
            [self.binary, "override", "remove", swap.remove, "--install", swap.install]
        )

    def install_groups(self, container: C, groups: Sequence[str]) -> C:
        raise self._groups_unsupported("install_groups")

    def remove_groups(self, container: C, groups: Sequence[str]) -> C:
        raise self._groups_unsupported("remove_groups")

    def apply(
        self,
        container: C,
        spec: BuildSpec,
        *,
        logger: StructuredLogger | None = None,
    ) -> C:
        if logger is not None and (spec.package_groups_installed or spec.package_groups_removed):
            logger.log(
                operation="package_groups_skipped",
                stage=PACKAGES_STAGE,
                level="warning",
                message="Package groups are not supported on ostree-based images.",
                extra={
                    "install": list(spec.package_groups_installed),
                    "remove": list(spec.package_groups_removed),
                },
            )

        removes, installs = spec.removes, spec.installs
        if removes or installs:
            # Swaps are only reached when no bulk install/remove ran.
            if spec.packages_swapped and logger is not None:
                logger.log(
                    operation="package_swaps_skipped",
                    stage=PACKAGES_STAGE,
                    level="warning",
                    message="Package swaps are skipped when installs or removals are requested.",
                    extra={
                        "swaps": [f"{s.remove}->{s.install}" for s in spec.packages_swapped],
                    },
                )
            if removes and installs:
                return self.replace(container, removes, installs)
            if removes:
                return self.remove(container, removes)
            return self.install(container, installs)

        for swap in spec.packages_swapped:
            container = self.swap(container, swap)
        return container

    def _groups_unsupported(self, operation: str) -> ValidationError:
        return ValidationError(
            "Package groups are not supported on ostree-based images.",
            hint="Use package names instead of groups for ostree-based base images.",
            context={"backend": self.name, "operation": operation},
        )

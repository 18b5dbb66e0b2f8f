"""Package manager strategies and backend selection."""

from fedimg.containers import Container
from fedimg.models import OSTREE_BOOTABLE_LABEL

from .base import PACKAGES_STAGE, PackageManager
from .dnf import DnfPackageManager
from .rpm_ostree import RpmOstreePackageManager


def is_ostree_bootable(container: Container) -> bool:
    return container.label(OSTREE_BOOTABLE_LABEL) == "true"


def select_package_manager(container: Container) -> PackageManager:
    """Pick the atomic backend for ostree-bootable images, dnf otherwise."""
    if is_ostree_bootable(container):
        return RpmOstreePackageManager()
    return DnfPackageManager()


__all__ = [
    "DnfPackageManager",
    "PACKAGES_STAGE",
    "PackageManager",
    "RpmOstreePackageManager",
    "is_ostree_bootable",
    "select_package_manager",
]

"""Base image coordinate, version, and release resolution."""

from __future__ import annotations

import re
from datetime import date as _date

from fedimg.containers import Container
from fedimg.errors import ResolutionError
from fedimg.models import VERSION_LABELS, ImageCoordinate

RELEASE_PATTERN = r"^\s*([^.\s]+)"


def container_address(
    registry: str,
    org: str | None,
    variant: str,
    suffix: str | None,
    tag: str,
) -> str:
    return ImageCoordinate(
        registry=registry,
        org=org,
        variant=variant,
        suffix=suffix,
        tag=tag,
    ).address


def build_date(today: _date | None = None) -> str:
    """Return the build date as YYYYMMDD."""
    return (today or _date.today()).strftime("%Y%m%d")


def version_from_labels(container: Container) -> str:
    """Return the first non-empty version label of the container."""
    for key in VERSION_LABELS:
        version = container.label(key)
        if version:
            return version
    raise ResolutionError(
        "Unable to determine version from container labels.",
        hint="The base image must set one of: " + ", ".join(VERSION_LABELS),
        context={"operation": "resolve_version", "image": getattr(container, "image", "")},
    )


def release_from_version(version: str) -> str:
    """Return the leading dot-delimited segment of ``version``."""
    try:
        return find_submatch(version, RELEASE_PATTERN)
    except ResolutionError as exc:
        raise ResolutionError(
            "Unable to determine release version from base image version.",
            context={
                "operation": "resolve_release",
                "version": version,
                "pattern": RELEASE_PATTERN,
            },
        ) from exc


def release_from_labels(container: Container) -> str:
    return release_from_version(version_from_labels(container))


def resolve_versions(container: Container) -> tuple[str, str | None]:
    """Return ``(version, release)``.

    A missing version is fatal; a release that cannot be derived is left unset.
    """
    version = version_from_labels(container)
    try:
        release: str | None = release_from_version(version)
    except ResolutionError:
        release = None
    return version, release


def default_tags(release: str | None, date: str, *, latest: bool = False) -> list[str]:
    tags: list[str] = []
    if release is not None:
        tags.extend([release, f"{release}-{date}"])
    tags.append(date)
    if latest:
        tags.append("latest")
    return tags


def find_submatch(text: str, pattern: str) -> str:
    """Return the first capture group of ``pattern`` in ``text``."""
    match = re.search(pattern, text)
    if match is None or not match.groups():
        raise ResolutionError(
            f"No value found for regex: {pattern}",
            context={"operation": "find_submatch", "pattern": pattern},
        )
    return match.group(1) or ""

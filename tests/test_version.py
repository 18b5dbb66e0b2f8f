from datetime import date

import pytest

from fedimg.containers import InProcessContainer
from fedimg.errors import ResolutionError
from fedimg.version import (
    RELEASE_PATTERN,
    build_date,
    container_address,
    default_tags,
    find_submatch,
    release_from_labels,
    release_from_version,
    resolve_versions,
    version_from_labels,
)


def test_container_address_formats() -> None:
    assert container_address("quay.io", "fedora", "fedora", None, "40") == (
        "quay.io/fedora/fedora:40"
    )
    assert container_address("ghcr.io", "ublue-os", "bluefin", "dx", "stable") == (
        "ghcr.io/ublue-os/bluefin-dx:stable"
    )
    assert container_address("registry.fedoraproject.org", None, "fedora", None, "rawhide") == (
        "registry.fedoraproject.org/fedora:rawhide"
    )


def test_version_falls_back_to_standard_label() -> None:
    container = _container({"org.opencontainers.image.version": "40.20241031.0"})

    assert version_from_labels(container) == "40.20241031.0"
    assert release_from_labels(container) == "40"


def test_primary_version_label_wins() -> None:
    container = _container({"version": "41", "org.opencontainers.image.version": "40.1"})

    assert version_from_labels(container) == "41"


def test_empty_primary_label_uses_fallback() -> None:
    container = _container({"version": "", "org.opencontainers.image.version": "39.1"})

    assert version_from_labels(container) == "39.1"


@pytest.mark.parametrize(
    "labels",
    [{}, {"version": "", "org.opencontainers.image.version": ""}],
)
def test_missing_version_is_fatal(labels: dict[str, str]) -> None:
    with pytest.raises(ResolutionError) as excinfo:
        version_from_labels(_container(labels))

    assert excinfo.value.code == "E_RESOLUTION"
    assert excinfo.value.context["image"] == "example/base:1"


def test_release_failure_is_not_fatal_for_resolution() -> None:
    version, release = resolve_versions(_container({"version": ".20241031"}))

    assert version == ".20241031"
    assert release is None
    with pytest.raises(ResolutionError):
        release_from_version(".20241031")


def test_release_is_the_leading_version_segment() -> None:
    assert release_from_version("40.20241031.0") == "40"
    assert release_from_version("rawhide") == "rawhide"

    with pytest.raises(ResolutionError) as excinfo:
        release_from_version("  .nightly")

    assert excinfo.value.context["version"] == "  .nightly"
    assert excinfo.value.context["pattern"] == RELEASE_PATTERN


def test_resolve_versions_requires_version() -> None:
    with pytest.raises(ResolutionError):
        resolve_versions(_container({}))


def test_default_tags_with_release() -> None:
    assert default_tags("40", "20241031", latest=True) == [
        "40",
        "40-20241031",
        "20241031",
        "latest",
    ]
    assert default_tags("40", "20241031") == ["40", "40-20241031", "20241031"]


def test_default_tags_without_release() -> None:
    assert default_tags(None, "20241031", latest=True) == ["20241031", "latest"]


def test_build_date_format() -> None:
    assert build_date(date(2024, 10, 31)) == "20241031"


def test_find_submatch_returns_first_group() -> None:
    text = 'host_spawn_version="1.6.0"\nother="x"\n'

    assert find_submatch(text, r'host_spawn_version="(.*?)"') == "1.6.0"


def test_find_submatch_raises_when_missing() -> None:
    with pytest.raises(ResolutionError) as excinfo:
        find_submatch("nothing here", r'version="(.*?)"')

    assert "No value found" in str(excinfo.value)


def _container(labels: dict[str, str]) -> InProcessContainer:
    return InProcessContainer(image="example/base:1", labels=labels)

"""Shared test fixtures."""

from __future__ import annotations

import pytest

from fedimg import Image, InProcessRuntime

FEDORA_IMAGE = "quay.io/fedora/fedora:40"
SILVERBLUE_IMAGE = "quay.io/fedora-ostree-desktops/silverblue:40"


@pytest.fixture
def runtime() -> InProcessRuntime:
    """Serve a mutable Fedora base and an ostree-bootable Silverblue base."""
    return InProcessRuntime(
        images={
            FEDORA_IMAGE: {"version": "40"},
            SILVERBLUE_IMAGE: {
                "ostree.bootable": "true",
                "org.opencontainers.image.version": "40.20241031.0",
            },
        }
    )


@pytest.fixture
def fedora(runtime: InProcessRuntime) -> Image:
    return Image(runtime=runtime, tag="40", date="20241031", fetcher=_repo_fetcher)


@pytest.fixture
def silverblue(runtime: InProcessRuntime) -> Image:
    return Image(
        runtime=runtime,
        org="fedora-ostree-desktops",
        variant="silverblue",
        tag="40",
        date="20241031",
        fetcher=_repo_fetcher,
    )


def _repo_fetcher(url: str) -> bytes:
    return f"# fetched from {url}\n".encode()

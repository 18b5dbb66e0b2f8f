"""Container collaborator interfaces and implementations."""

from .base import Container, ContainerRuntime, ContainerT
from .containerfile import ContainerfileContainer
from .inprocess import InProcessContainer, InProcessRuntime, Operation
from .podman import PodmanRuntime

__all__ = [
    "Container",
    "ContainerRuntime",
    "ContainerT",
    "ContainerfileContainer",
    "InProcessContainer",
    "InProcessRuntime",
    "Operation",
    "PodmanRuntime",
]

"""Public package entrypoint for the fedimg image builder."""

from .containers import (
    Container,
    ContainerfileContainer,
    ContainerRuntime,
    InProcessContainer,
    InProcessRuntime,
    PodmanRuntime,
)
from .errors import (
    ExecutionError,
    FedimgError,
    FetchError,
    PolicyError,
    ResolutionError,
    ValidationError,
)
from .image import Image
from .models import (
    BuildSpec,
    DirectoryMount,
    FileMount,
    ImageCoordinate,
    Label,
    PackageSwap,
    Repo,
    Script,
)
from .pipeline import execute
from .policy import BuildPaths, Policy
from .recipe import load_recipe
from .version import container_address, default_tags

__all__ = [
    "BuildPaths",
    "BuildSpec",
    "Container",
    "ContainerRuntime",
    "ContainerfileContainer",
    "DirectoryMount",
    "ExecutionError",
    "FedimgError",
    "FetchError",
    "FileMount",
    "Image",
    "ImageCoordinate",
    "InProcessContainer",
    "InProcessRuntime",
    "Label",
    "PackageSwap",
    "PodmanRuntime",
    "Policy",
    "PolicyError",
    "Repo",
    "ResolutionError",
    "Script",
    "ValidationError",
    "container_address",
    "default_tags",
    "execute",
    "load_recipe",
]

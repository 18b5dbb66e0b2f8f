"""Compiler interfaces for emitting Containerfile build directories."""

from .emit_containerfile import (
    CONTEXT_DIRNAME,
    ContainerfileEmission,
    emit_containerfile,
    render_containerfile,
)

__all__ = [
    "CONTEXT_DIRNAME",
    "ContainerfileEmission",
    "emit_containerfile",
    "render_containerfile",
]

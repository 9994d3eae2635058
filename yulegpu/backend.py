"""Discovery, ranking and construction of compute backends."""

from __future__ import annotations

from collections.abc import Iterable

from yulegpu.core import BackendKind, ComputeBackend, GpuError
from yulegpu.cpu import CpuBackend

_PRIORITY = (BackendKind.CUDA, BackendKind.METAL, BackendKind.VULKAN, BackendKind.CPU)


def select_best_backend(available: Iterable[BackendKind]) -> BackendKind:
    """Pick the preferred backend: CUDA, then Metal, then Vulkan, then CPU."""
    offered = set(available)
    return next((kind for kind in _PRIORITY if kind in offered), BackendKind.CPU)


def detect_backends() -> list[BackendKind]:
    """Backends usable in this environment."""
    return [BackendKind.CPU]


def create_backend(kind: BackendKind) -> ComputeBackend:
    """Construct a backend of the given kind."""
    if kind is BackendKind.CPU:
        return CpuBackend()
    raise GpuError(f"backend {kind.value} not compiled in — enable the feature flag")
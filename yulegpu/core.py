"""Core types shared by every compute backend."""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, NoReturn


class GpuError(Exception):
    """Raised when a compute backend cannot carry out an operation."""


@dataclass(frozen=True, order=True)
class BufferHandle:
    """Opaque identifier of a buffer owned by a backend."""

    value: int


class BackendKind(enum.Enum):
    """The kinds of compute backend known to the package."""

    CPU = "cpu"
    VULKAN = "vulkan"
    CUDA = "cuda"
    METAL = "metal"


@dataclass(frozen=True)
class DeviceInfo:
    """Description of the device a backend runs on."""

    name: str
    backend: BackendKind
    memory_bytes: int
    compute_units: int


def _unsupported(operation: str) -> NoReturn:
    """Raise the error reported for an operation a backend does not provide."""
    raise GpuError(f"{operation} not supported on this backend")


class ComputeBackend(ABC):
    """Interface every compute backend implements.

    Buffers hold little-endian float32 data unless stated otherwise.
    """

    @abstractmethod
    def name(self) -> str:
        """Short name of the backend."""

    @abstractmethod
    def device_info(self) -> DeviceInfo:
        """Information about the underlying device."""

    @abstractmethod
    def allocate(self, size_bytes: int) -> BufferHandle:
        """Allocate a zero-filled buffer of ``size_bytes`` bytes."""

    @abstractmethod
    def free(self, handle: BufferHandle) -> None:
        """Release a buffer; unknown handles are ignored."""

    @abstractmethod
    def matmul(
        self,
        a: BufferHandle,
        b: BufferHandle,
        out: BufferHandle,
        m: int,
        n: int,
        k: int,
    ) -> None:
        """Row-major ``out[m, n] = a[m, k] @ b[k, n]``."""

    @abstractmethod
    def softmax(self, input: BufferHandle, output: BufferHandle, size: int) -> None:
        """Numerically stable softmax over the first ``size`` values."""

    @abstractmethod
    def rms_norm(
        self,
        input: BufferHandle,
        weight: BufferHandle,
        output: BufferHandle,
        size: int,
        eps: float,
    ) -> None:
        """RMS normalisation scaled by ``weight``."""

    @abstractmethod
    def rope(
        self,
        q: BufferHandle,
        k: BufferHandle,
        pos: int,
        head_dim: int,
        freq_base: float,
        n_heads_q: int,
        n_heads_k: int,
    ) -> None:
        """Rotary position embedding applied in place to ``q`` and ``k``."""

    @abstractmethod
    def silu(self, input: BufferHandle, output: BufferHandle, size: int) -> None:
        """Element-wise ``x * sigmoid(x)``."""

    @abstractmethod
    def element_mul(
        self, a: BufferHandle, b: BufferHandle, output: BufferHandle, size: int
    ) -> None:
        """Element-wise product."""

    @abstractmethod
    def add(
        self, a: BufferHandle, b: BufferHandle, output: BufferHandle, size: int
    ) -> None:
        """Element-wise sum."""

    @abstractmethod
    def copy_to_device(self, data: bytes, handle: BufferHandle) -> None:
        """Write ``data`` to the start of a buffer."""

    @abstractmethod
    def copy_from_device(self, handle: BufferHandle, size: int) -> bytes:
        """Read the first ``size`` bytes of a buffer."""

    @abstractmethod
    def copy_buffer(self, src: BufferHandle, dst: BufferHandle, size: int) -> None:
        """Copy ``size`` bytes from the start of ``src`` to the start of ``dst``."""

    @abstractmethod
    def copy_buffer_offset(
        self,
        src: BufferHandle,
        dst: BufferHandle,
        src_offset: int,
        dst_offset: int,
        size: int,
    ) -> None:
        """Copy ``size`` bytes between buffers at the given byte offsets."""

    @abstractmethod
    def synchronize(self) -> None:
        """Wait until all queued work has finished."""

    def attn_score(
        self,
        q: BufferHandle,
        k_cache: BufferHandle,
        scores: BufferHandle,
        head_dim: int,
        seq_len: int,
        head_offset: int,
        kv_offset: int,
        kv_stride: int,
    ) -> None:
        """Attention scores of one head against the key cache.

        Backends without a fused kernel raise :class:`GpuError`.
        """
        _unsupported("attn_score")

    def attn_value(
        self,
        weights: BufferHandle,
        v_cache: BufferHandle,
        output: BufferHandle,
        head_dim: int,
        seq_len: int,
        kv_offset: int,
        kv_stride: int,
        out_offset: int,
    ) -> None:
        """Weighted sum of the value cache for one head.

        Backends without a fused kernel raise :class:`GpuError`.
        """
        _unsupported("attn_value")

    def quantized_matmul(
        self,
        weights: BufferHandle,
        input: BufferHandle,
        output: BufferHandle,
        n_rows: int,
        n_cols: int,
        dtype: Any,
    ) -> None:
        """Fused dequantise and matrix-vector product.

        Backends without a fused kernel raise :class:`GpuError`.
        """
        _unsupported("quantized_matmul")
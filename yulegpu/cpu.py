"""Compute backend that runs every operation on the host CPU."""

from __future__ import annotations

import os
import threading
from collections.abc import Callable, Iterable

import numpy as np

from yulegpu import kernels
from yulegpu.buffer import next_buffer_handle
from yulegpu.core import BackendKind, BufferHandle, ComputeBackend, DeviceInfo, GpuError

_F32 = np.dtype("<f4")


class CpuBackend(ComputeBackend):
    """Synchronous backend keeping buffers as host byte arrays."""

    def __init__(self) -> None:
        self._buffers: dict[int, bytearray] = {}
        self._lock = threading.Lock()

    def _get(self, handle: BufferHandle, message: str | None = None) -> bytearray:
        try:
            return self._buffers[handle.value]
        except KeyError:
            raise GpuError(message or f"buffer {handle.value} not found") from None

    def _check_f32(self, handle: BufferHandle) -> bytearray:
        buf = self._get(handle)
        if len(buf) % 4:
            raise GpuError(
                f"buffer {handle.value} holds {len(buf)} bytes, not a whole number of f32 values"
            )
        return buf

    def _read_f32(self, handle: BufferHandle) -> np.ndarray:
        buf = self._check_f32(handle)
        return np.frombuffer(bytes(buf), dtype=_F32).astype(np.float32)

    def _write_f32(self, handle: BufferHandle, values: np.ndarray) -> None:
        buf = self._check_f32(handle)
        data = np.asarray(values, dtype=_F32).tobytes()
        if len(data) > len(buf):
            raise GpuError(
                f"buffer {handle.value} holds {len(buf)} bytes but {len(data)} are needed"
            )
        buf[: len(data)] = data

    def _apply(
        self,
        inputs: Iterable[BufferHandle],
        output: BufferHandle,
        kernel: Callable[..., np.ndarray],
    ) -> None:
        with self._lock:
            arrays = [self._read_f32(handle) for handle in inputs]
            self._check_f32(output)
            try:
                result = kernel(*arrays)
            except ValueError as exc:
                raise GpuError(str(exc)) from exc
            self._write_f32(output, result)

    def name(self) -> str:
        return "cpu"

    def device_info(self) -> DeviceInfo:
        return DeviceInfo(
            name="CPU",
            backend=BackendKind.CPU,
            memory_bytes=0,
            compute_units=os.cpu_count() or 1,
        )

    def allocate(self, size_bytes: int) -> BufferHandle:
        if size_bytes < 0:
            raise GpuError(f"cannot allocate a buffer of {size_bytes} bytes")
        handle = next_buffer_handle()
        with self._lock:
            self._buffers[handle.value] = bytearray(size_bytes)
        return handle

    def free(self, handle: BufferHandle) -> None:
        with self._lock:
            self._buffers.pop(handle.value, None)

    def matmul(
        self,
        a: BufferHandle,
        b: BufferHandle,
        out: BufferHandle,
        m: int,
        n: int,
        k: int,
    ) -> None:
        self._apply((a, b), out, lambda x, y: kernels.matmul(x, y, m, n, k))

    def softmax(self, input: BufferHandle, output: BufferHandle, size: int) -> None:
        self._apply((input,), output, lambda x: kernels.softmax(x, size))

    def rms_norm(
        self,
        input: BufferHandle,
        weight: BufferHandle,
        output: BufferHandle,
        size: int,
        eps: float,
    ) -> None:
        self._apply(
            (input, weight), output, lambda x, w: kernels.rms_norm(x, w, size, eps)
        )

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
        # Head counts follow from the buffer sizes; the arguments are kept for
        # interface compatibility with device backends.
        with self._lock:
            for handle in (q, k):
                data = self._read_f32(handle)
                try:
                    rotated = kernels.rope(data, pos, head_dim, freq_base)
                except ValueError as exc:
                    raise GpuError(str(exc)) from exc
                self._write_f32(handle, rotated)

    def silu(self, input: BufferHandle, output: BufferHandle, size: int) -> None:
        self._apply((input,), output, lambda x: kernels.silu(x, size))

    def element_mul(
        self, a: BufferHandle, b: BufferHandle, output: BufferHandle, size: int
    ) -> None:
        self._apply((a, b), output, lambda x, y: kernels.element_mul(x, y, size))

    def add(
        self, a: BufferHandle, b: BufferHandle, output: BufferHandle, size: int
    ) -> None:
        self._apply((a, b), output, lambda x, y: kernels.add(x, y, size))

    def copy_to_device(self, data: bytes, handle: BufferHandle) -> None:
        with self._lock:
            buf = self._get(handle, "buffer not found")
            if len(data) > len(buf):
                raise GpuError(
                    f"cannot write {len(data)} bytes into a buffer of {len(buf)} bytes"
                )
            buf[: len(data)] = data

    def copy_from_device(self, handle: BufferHandle, size: int) -> bytes:
        with self._lock:
            buf = self._get(handle, "buffer not found")
            if size < 0 or size > len(buf):
                raise GpuError(
                    f"cannot read {size} bytes from a buffer of {len(buf)} bytes"
                )
            return bytes(buf[:size])

    def copy_buffer(self, src: BufferHandle, dst: BufferHandle, size: int) -> None:
        with self._lock:
            src_buf = self._get(src)
            dst_buf = self._get(dst)
            n = max(0, min(size, len(src_buf), len(dst_buf)))
            dst_buf[:n] = src_buf[:n]

    def copy_buffer_offset(
        self,
        src: BufferHandle,
        dst: BufferHandle,
        src_offset: int,
        dst_offset: int,
        size: int,
    ) -> None:
        with self._lock:
            src_buf = self._get(src)
            dst_buf = self._get(dst)
            if min(src_offset, dst_offset, size) < 0:
                raise GpuError("offsets and size must not be negative")
            if src_offset + size > len(src_buf):
                raise GpuError(
                    f"source range {src_offset}..{src_offset + size} exceeds {len(src_buf)} bytes"
                )
            if dst_offset + size > len(dst_buf):
                raise GpuError(
                    f"destination range {dst_offset}..{dst_offset + size} exceeds {len(dst_buf)} bytes"
                )
            dst_buf[dst_offset : dst_offset + size] = src_buf[
                src_offset : src_offset + size
            ]

    def synchronize(self) -> None:
        """Wait for any operation another thread is running on this backend."""
        self._lock.acquire()
        self._lock.release()
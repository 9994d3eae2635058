# yulegpu

Compute backends for transformer inference. A backend owns a set of byte
buffers, each named by a `BufferHandle`, and runs the usual decoder kernels
on them: matrix multiply, softmax, RMSNorm, rotary position embedding, SiLU,
element-wise multiply and add. All kernels read and write little-endian
32-bit floats.

## Installation

```
pip install yulegpu
```

## Usage

```python
import numpy as np

from yulegpu.backend import create_backend, detect_backends, select_best_backend

kind = select_best_backend(detect_backends())
backend = create_backend(kind)

inp = backend.allocate(16)   # four float32 values, zero-filled
out = backend.allocate(16)
backend.copy_to_device(np.array([1, 2, 3, 4], dtype="<f4").tobytes(), inp)

backend.softmax(inp, out, 4)
probs = np.frombuffer(backend.copy_from_device(out, 16), dtype="<f4")
```

## Modules

- `yulegpu.core` holds the shared types: `BufferHandle`, `DeviceInfo`,
  the `BackendKind` enum (`CPU`, `VULKAN`, `CUDA`, `METAL`), the
  `GpuError` exception and the abstract `ComputeBackend` interface.
- `yulegpu.cpu` provides `CpuBackend`, which keeps every buffer in host
  memory and runs each operation synchronously.
- `yulegpu.kernels` has the same kernels as plain functions (`matmul`,
  `softmax`, `rms_norm`, `rope`, `silu`, `element_mul`, `add`). They take
  array-like float data, leave their inputs untouched and return a new
  `numpy.float32` array. Bad sizes raise `ValueError`.
- `yulegpu.backend` has `select_best_backend`, which prefers CUDA, then
  Metal, then Vulkan, then CPU; `detect_backends`, which reports the
  backends usable here; and `create_backend`, which builds one.
- `yulegpu.buffer` has `next_buffer_handle`, which hands out unique,
  increasing handles across the process, and `BufferPool`, which records a
  byte capacity (`max_capacity`) and reports the bytes allocated from it
  (`total_allocated`).

## Errors

`CpuBackend` raises `GpuError` for an unknown buffer handle, for reads,
writes and copies that fall outside a buffer, and for kernel arguments that
do not fit the buffers. `free` ignores unknown handles. `copy_buffer` copies
at most as many bytes as both buffers hold.

## What this package does not do

Only the CPU backend exists. `detect_backends` always returns
`[BackendKind.CPU]`, and `create_backend` raises `GpuError` for any other
kind. `CpuBackend` does not provide the fused operations `attn_score`,
`attn_value` or `quantized_matmul`; calling them raises `GpuError`.
`BufferPool` does not allocate or free memory itself. The package offers
the building blocks of a forward pass but does not load models or run
inference.

## Running the tests

```
pip install -e ".[test]"
pytest
```
"""Reference float32 kernels for transformer inference on the CPU.

Every function takes array-like float data, leaves its inputs untouched and
returns a new ``numpy.float32`` array.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike, NDArray

Float32Array = NDArray[np.float32]


def _as_f32(values: ArrayLike) -> Float32Array:
    return np.asarray(values, dtype=np.float32).ravel()


def _prefix(values: ArrayLike, size: int, what: str) -> Float32Array:
    arr = _as_f32(values)
    if size < 0:
        raise ValueError(f"{what}: size must not be negative, got {size}")
    if size > arr.size:
        raise ValueError(f"{what}: needs {size} values but only {arr.size} given")
    return arr[:size]


def matmul(a: ArrayLike, b: ArrayLike, m: int, n: int, k: int) -> Float32Array:
    """Row-major product ``C[m, n] = A[m, k] @ B[k, n]``, flattened."""
    a_mat = _prefix(a, m * k, "matmul a").reshape(m, k)
    b_mat = _prefix(b, k * n, "matmul b").reshape(k, n)
    return (a_mat @ b_mat).astype(np.float32).ravel()


def softmax(values: ArrayLike, size: int) -> Float32Array:
    """Numerically stable softmax over the first ``size`` values."""
    x = _prefix(values, size, "softmax")
    if size == 0:
        return x.copy()
    shifted = np.exp(x - x.max())
    return (shifted * (np.float32(1.0) / shifted.sum(dtype=np.float32))).astype(
        np.float32
    )


def rms_norm(
    values: ArrayLike, weight: ArrayLike, size: int, eps: float
) -> Float32Array:
    """``values / sqrt(mean(values**2) + eps) * weight`` over ``size`` values."""
    x = _prefix(values, size, "rms_norm input")
    w = _prefix(weight, size, "rms_norm weight")
    if size == 0:
        return x.copy()
    mean_sq = np.dot(x, x) / np.float32(size)
    inv_rms = np.float32(1.0) / np.sqrt(np.float32(mean_sq + np.float32(eps)))
    return (x * inv_rms * w).astype(np.float32)


def rope(data: ArrayLike, pos: int, head_dim: int, freq_base: float) -> Float32Array:
    """Rotary position embedding over every whole head in ``data``.

    Pairs ``(x[2i], x[2i+1])`` of each head are rotated by ``pos * freq_i``
    with ``freq_i = freq_base ** (-2i / head_dim)``. Values past the last
    whole head are returned unchanged.
    """
    if head_dim <= 0:
        raise ValueError(f"rope: head_dim must be positive, got {head_dim}")
    out = _as_f32(data).copy()
    n_heads = out.size // head_dim
    half = head_dim // 2
    if n_heads == 0 or half == 0:
        return out

    idx = np.arange(half, dtype=np.float32)
    exponent = (np.float32(2.0) * idx / np.float32(head_dim)).astype(np.float32)
    freq = np.float32(1.0) / np.power(np.float32(freq_base), exponent)
    theta = (np.float32(pos) * freq).astype(np.float32)
    cos_t = np.cos(theta)
    sin_t = np.sin(theta)

    heads = out[: n_heads * head_dim].reshape(n_heads, head_dim)
    x0 = heads[:, 0 : 2 * half : 2].copy()
    x1 = heads[:, 1 : 2 * half : 2].copy()
    heads[:, 0 : 2 * half : 2] = x0 * cos_t - x1 * sin_t
    heads[:, 1 : 2 * half : 2] = x0 * sin_t + x1 * cos_t
    return out


def silu(values: ArrayLike, size: int) -> Float32Array:
    """Sigmoid linear unit ``x * sigmoid(x)`` over ``size`` values."""
    x = _prefix(values, size, "silu")
    with np.errstate(over="ignore"):
        sigmoid = np.float32(1.0) / (np.float32(1.0) + np.exp(-x))
    return (x * sigmoid).astype(np.float32)


def element_mul(a: ArrayLike, b: ArrayLike, size: int) -> Float32Array:
    """Element-wise product of the first ``size`` values."""
    return (_prefix(a, size, "element_mul a") * _prefix(b, size, "element_mul b")).astype(
        np.float32
    )


def add(a: ArrayLike, b: ArrayLike, size: int) -> Float32Array:
    """Element-wise sum of the first ``size`` values."""
    return (_prefix(a, size, "add a") + _prefix(b, size, "add b")).astype(np.float32)
"""Compute backends for transformer inference, with a numpy CPU backend and reference kernels."""

__version__ = "0.1.0"
__all__ = ["backend", "buffer", "core", "cpu", "kernels"]
import pytest

from yulegpu.backend import create_backend, detect_backends, select_best_backend
from yulegpu.core import BackendKind, GpuError


def test_select_prefers_cuda_when_all_available():
    assert select_best_backend(list(BackendKind)) is BackendKind.CUDA


def test_select_prefers_metal_over_vulkan():
    kinds = [BackendKind.CPU, BackendKind.VULKAN, BackendKind.METAL]
    assert select_best_backend(kinds) is BackendKind.METAL


def test_select_prefers_vulkan_over_cpu():
    kinds = [BackendKind.CPU, BackendKind.VULKAN]
    assert select_best_backend(kinds) is BackendKind.VULKAN


def test_select_defaults_to_cpu_when_empty():
    assert select_best_backend([]) is BackendKind.CPU


def test_select_is_order_independent():
    kinds = [BackendKind.VULKAN, BackendKind.CUDA, BackendKind.CPU]
    assert select_best_backend(kinds) == select_best_backend(list(reversed(kinds)))


def test_detect_backends_includes_cpu_first():
    detected = detect_backends()
    assert detected[0] is BackendKind.CPU
    assert select_best_backend(detected) in detected


def test_create_cpu_backend():
    backend = create_backend(BackendKind.CPU)
    assert backend.name() == "cpu"
    assert backend.device_info().backend is BackendKind.CPU


@pytest.mark.parametrize(
    "kind", [BackendKind.VULKAN, BackendKind.CUDA, BackendKind.METAL]
)
def test_create_unavailable_backend_raises(kind):
    with pytest.raises(GpuError, match="not compiled in"):
        create_backend(kind)


def test_every_detected_backend_can_be_created():
    for kind in detect_backends():
        assert create_backend(kind).device_info().backend is kind
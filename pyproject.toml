[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "yulegpu"
version = "0.1.0"
description = "Compute backends for transformer inference: buffer handles, a CPU reference backend built on numpy, and backend selection"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = ["inference", "transformer", "compute", "backend", "rope", "rmsnorm", "softmax", "silu"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Artificial Intelligence",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["yulegpu"]

[tool.pytest.ini_options]
addopts = "-ra"

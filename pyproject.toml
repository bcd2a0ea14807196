[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "qlemu"
version = "0.1.0"
description = "Host-side helpers for a Sinclair QL / nextp8 emulator: options, block device, screen decoding, input mapping, shaders and tracing"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "emulator",
    "sinclair-ql",
    "qdos",
    "nextp8",
    "framebuffer",
    "keyboard-mapping",
    "block-device",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Emulators",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["qlemu"]

[tool.hatch.build.targets.sdist]
include = ["qlemu", "tests", "README.md", "pyproject.toml"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true

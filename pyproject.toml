[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ddsmesh"
version = "0.1.0"
description = "DDS texture parsing and surface layout, lit mesh normals and a key-state bit mask"
requires-python = ">=3.10"
dependencies = []
keywords = ["dds", "dxgi", "texture", "mipmap", "mesh", "normals", "sphere"]
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
    "Topic :: Multimedia :: Graphics",
]

[project.optional-dependencies]
test = ["pytest", "hypothesis"]

[tool.hatch.build.targets.wheel]
packages = ["ddsmesh"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

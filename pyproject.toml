[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "borshpy"
version = "0.1.0"
description = "Borsh binary serialization with self-describing schemas"
requires-python = ">=3.10"
dependencies = []
keywords = ["borsh", "serialization", "binary", "schema", "encoding"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest", "hypothesis"]

[project.scripts]
borshpy-schema-schema = "borshpy.schema_helpers:main"

[tool.hatch.build.targets.wheel]
packages = ["borshpy"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

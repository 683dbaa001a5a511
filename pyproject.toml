[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "syncworks"
version = "0.1.0"
description = "Concurrency building blocks: lock-free stacks, hazard pointers, reference counting, a growable array, a thread pool and a small caching TCP server."
requires-python = ">=3.10"
dependencies = []
keywords = [
    "concurrency",
    "lock-free",
    "hazard-pointers",
    "thread-pool",
    "treiber-stack",
    "elimination-stack",
    "reference-counting",
    "growable-array",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
syncworks-server = "syncworks.server:main"

[tool.hatch.build.targets.wheel]
packages = ["syncworks"]

[tool.hatch.build.targets.sdist]
include = ["syncworks", "tests", "pyproject.toml", "README.md"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true

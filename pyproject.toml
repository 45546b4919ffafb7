[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "memoassist"
version = "0.1.0"
description = "A personal memo and task assistant with per-user SQLite storage, a month calendar and activity reports."
requires-python = ">=3.10"
dependencies = []
keywords = ["memo", "tasks", "todo", "calendar", "scheduling", "report", "sqlite"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Natural Language :: Chinese (Simplified)",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Office/Business :: Scheduling",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
memoassist = "memoassist.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["memoassist"]

[tool.hatch.build.targets.sdist]
include = ["memoassist", "tests", "pyproject.toml"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true

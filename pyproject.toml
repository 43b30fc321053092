[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rmdecision"
version = "0.1.0"
description = "Decision, limiting and filtering helpers for competition robots, with a video transmission link decoder"
requires-python = ">=3.10"
dependencies = [
    "numpy",
    "pyserial",
]
keywords = [
    "robotics",
    "kalman-filter",
    "lqr",
    "trajectory",
    "crc",
    "serial",
    "power-limit",
    "heat-limit",
]
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
    "Topic :: Scientific/Engineering :: Human Machine Interfaces",
    "Topic :: Scientific/Engineering :: Mathematics",
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
rmdecision-vt = "rmdecision.video_transmission:main"

[tool.hatch.build.targets.wheel]
packages = ["rmdecision"]

[tool.hatch.build.targets.sdist]
include = [
    "rmdecision",
    "tests",
]

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
ignore_missing_imports = true

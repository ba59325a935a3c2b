[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gridterm"
version = "0.9.2"
description = "Display-independent terminal grid: scrollback, reflow, selection, keyboard selection, URL detection and box-drawing geometry"
requires-python = ">=3.10"
dependencies = ["wcwidth"]
keywords = ["terminal", "emulator", "scrollback", "reflow", "box-drawing", "selection", "farbfeld", "osc7"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Terminals :: Terminal Emulators/X Terminals",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["gridterm"]

[tool.pytest.ini_options]
addopts = "-ra"

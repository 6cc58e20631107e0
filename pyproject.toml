[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "termemu"
version = "1.0.0"
description = "A small ANSI terminal emulator with a pygame window and a pseudo-terminal shell"
requires-python = ">=3.10"
keywords = ["terminal", "emulator", "ansi", "pty", "pygame"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: X11 Applications",
    "Environment :: MacOS X",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Terminals :: Terminal Emulators/X Terminals",
]
dependencies = [
    "pygame",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
termemu = "termemu.window:main"

[tool.hatch.build.targets.wheel]
packages = ["termemu"]

[tool.pytest.ini_options]
addopts = "-ra"

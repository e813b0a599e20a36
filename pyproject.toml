[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tunedeck"
version = "0.1.0"
description = "Command language, keybindings, configuration and control socket for a terminal music player"
requires-python = ">=3.11"
keywords = ["music", "player", "terminal", "keybindings", "ipc", "commands"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Sound/Audio :: Players",
]
dependencies = [
    "cbor2",
    "platformdirs",
    "tomli-w",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
tunedeck = "tunedeck.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["tunedeck"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true

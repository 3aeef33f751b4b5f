[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "umachine"
version = "0.1.0"
description = "An interpreter for the Universal Machine: a 14-instruction, segmented-memory virtual machine"
requires-python = ">=3.10"
dependencies = []
keywords = ["universal machine", "virtual machine", "emulator", "interpreter", "bytecode"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
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

[project.scripts]
umachine = "umachine.machine:main"

[tool.hatch.build.targets.wheel]
packages = ["umachine"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

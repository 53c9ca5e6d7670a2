[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kerchow"
version = "0.1.0"
description = "A small statically typed prefix-notation language with a bytecode compiler and stack virtual machine."
requires-python = ">=3.10"
dependencies = []
keywords = ["interpreter", "bytecode", "virtual-machine", "compiler", "language"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Interpreters",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
kerchow = "kerchow.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["kerchow"]

[tool.pytest.ini_options]
addopts = "-ra"

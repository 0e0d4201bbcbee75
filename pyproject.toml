[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tinyshell"
version = "0.1.0"
description = "Building blocks of a small command shell: lexer, environment, builtins, redirections, wildcards and pipeline execution"
requires-python = ">=3.10"
dependencies = []
keywords = ["shell", "command line", "pipeline", "lexer", "builtins", "wildcards"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Shells",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["tinyshell"]

[tool.pytest.ini_options]
addopts = "-ra"

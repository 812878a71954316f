[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rcokit"
version = "0.1.0"
description = "VSMX script bytecode reading, writing, disassembly and decompilation, plus RCO resource file structures"
requires-python = ">=3.10"
dependencies = []
keywords = ["rco", "vsmx", "psp", "ps3", "resource", "bytecode", "decompiler", "file-format"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: File Formats",
    "Topic :: Software Development :: Disassemblers",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["rcokit"]

[tool.pytest.ini_options]
addopts = "-ra"

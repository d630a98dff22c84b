[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sshash"
version = "0.1.0"
description = "K-mer building blocks (minimizers, Elias-Fano sequences, compressed weights) and a tool that permutes weighted FASTA files to reduce weight runs"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "bioinformatics",
    "k-mers",
    "minimizers",
    "elias-fano",
    "murmurhash",
    "fasta",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Bio-Informatics",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
sshash = "sshash.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["sshash"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

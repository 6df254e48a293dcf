[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "liftstream"
version = "0.1.0"
description = "Building blocks for a replicated message-stream server: wire encoding, replication batches, cluster subjects and background tasks"
requires-python = ">=3.10"
dependencies = []
keywords = ["streaming", "replication", "raft", "wire-format", "messaging"]
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
    "Topic :: System :: Distributed Computing",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["liftstream"]

[tool.pytest.ini_options]
addopts = "-ra"

[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rotector"
version = "0.1.0"
description = "Building blocks for a moderation pipeline: progress bars, text normalisation and decoding, Redis-backed queues and statistics, and concurrent profile fetchers."
requires-python = ">=3.10"
keywords = ["moderation", "redis", "queue", "morse", "binary", "progress-bar"]
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
    "Topic :: Internet",
]
dependencies = [
    "redis",
    "requests",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["rotector"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

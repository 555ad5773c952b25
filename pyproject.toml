[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pelikit"
version = "0.1.0"
description = "Token-bucket rate limiting, routed inter-thread queues and a queue-backed asynchronous logging backend"
requires-python = ">=3.10"
dependencies = []
keywords = ["ratelimit", "token-bucket", "logging", "queues", "threads"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries",
    "Topic :: System :: Logging",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["pelikit"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "brynet"
version = "0.1.0"
description = "TCP networking building blocks: packet codecs, WebSocket framing, HTTP parsing, staged receiving, polling and a listen thread"
requires-python = ">=3.10"
dependencies = []
keywords = ["tcp", "networking", "websocket", "http", "packet", "poll", "listener"]
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
    "Topic :: System :: Networking",
    "Topic :: Internet",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["brynet"]

[tool.pytest.ini_options]
addopts = "-ra"

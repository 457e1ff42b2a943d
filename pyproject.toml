[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "udpchat"
version = "0.1.0"
description = "Peer-to-peer UDP chat with a small name-lookup server"
requires-python = ">=3.10"
dependencies = []
keywords = ["chat", "udp", "peer-to-peer", "name server", "messaging"]
classifiers = [
    "Development Status :: 3 - Alpha",
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
    "Topic :: Communications :: Chat",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
udpchat-server = "udpchat.server:main"
udpchat = "udpchat.chat:main"

[tool.hatch.build.targets.wheel]
packages = ["udpchat"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

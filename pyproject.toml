[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "netlab"
version = "0.1.0"
description = "Small networking exercises: IPv4 classes, bit coding, message queues and socket services"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "networking",
    "sockets",
    "ipv4",
    "crc",
    "parity",
    "bit-stuffing",
    "message-queue",
    "chat",
    "udp",
    "unix-socket",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
    "Topic :: Education",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
netlab-ipv4 = "netlab.ipv4:main"
netlab-tcp = "netlab.tcp_services:main"
netlab-chat = "netlab.chat:main"
netlab-local = "netlab.local_services:main"

[tool.hatch.build.targets.wheel]
packages = ["netlab"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

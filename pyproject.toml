[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "comrelay"
version = "0.0.0"
description = "Building blocks for a community relay on EVM chains: event signatures, topics, logs, user operations, nonces, secrets and websocket pools"
requires-python = ">=3.10"
keywords = ["ethereum", "evm", "relay", "abi", "events", "websocket", "json-rpc", "erc-4337"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Software Development :: Libraries :: Python Modules",
]
dependencies = [
    "pycryptodome",
    "cryptography",
    "pillow",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["comrelay"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

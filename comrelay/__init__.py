"""Building blocks for a community relay on EVM chains: event signatures, topics,
logs, user operations, nonces, secrets, reply bodies and websocket pools."""

__version__ = "0.0.0"
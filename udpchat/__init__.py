"""Peer-to-peer UDP chat with a small name-lookup server."""

__version__ = "0.1.0"
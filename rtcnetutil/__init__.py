"""Asyncio networking utilities: packet buffers, connections, listeners and interface discovery."""

__version__ = "0.1.0"
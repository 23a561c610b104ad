"""Command modules for the tvm CLI."""

from . import cache, credentials

__all__ = ["cache", "credentials"]

"""Build authoritative DNS servers from callback-driven zones."""

__version__ = "0.1.0"
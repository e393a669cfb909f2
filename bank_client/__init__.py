"""Client core for the banking API."""

__version__ = "0.1.0"

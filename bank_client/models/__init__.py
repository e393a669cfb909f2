"""Domain models for the banking client."""

from bank_client.models.base import Event

__all__ = ["Event"]
